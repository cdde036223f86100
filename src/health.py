import json

from version import __version__
from utils.config import load_settings
from utils.logger import log

settings = load_settings()


def lambda_handler(event, context):
    http = event.get("requestContext", {}).get("http", {})
    path = event.get("rawPath") or http.get("path", "/healthz")
    log("health.check", path=path, method=http.get("method", "GET"))

    if path.endswith("/version"):
        body = {"version": __version__}
    else:
        body = {
            "status": "ok",
            "channel": settings.channel,
            "recipients": len(settings.recipients),
        }

    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }
