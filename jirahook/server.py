from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.concurrency import run_in_threadpool

from .entities import Outcome


__all__ = ["create_app"]


def create_app(processor):
    app = FastAPI(title="jirahook", description="GitHub pull request webhooks for JIRA issue transitions")

    @app.post("/", response_class=PlainTextResponse)
    async def receive_webhook(request: Request):
        body = await request.body()

        # Processing makes blocking GitHub and JIRA calls:
        outcome = await run_in_threadpool(processor.handle, body, dict(request.headers))

        if outcome == Outcome.REJECTED:
            return PlainTextResponse("Invalid signature", status_code=401)

        return PlainTextResponse("Done")

    return app
