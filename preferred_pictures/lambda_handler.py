"""AWS Lambda entry point.

Mangum translates API Gateway HTTP API (v2) events into ASGI, so the
signing service runs unchanged on Lambda.
"""

from mangum import Mangum

from preferred_pictures.service.app import app

handler = Mangum(app, lifespan="off")
