# handler.py
"""AWS Lambda entry point for the zerobudget API.

API Gateway events are translated to ASGI by Mangum and served by
``zerobudget.main.app``; the same app runs under uvicorn locally.
"""

import os

from mangum import Mangum
from zerobudget.main import app

# Stage prefix API Gateway adds in front of /api (e.g. "/prod"); lifespan is unused on Lambda
handler = Mangum(
    app,
    lifespan="off",
    api_gateway_base_path=os.getenv("API_GATEWAY_BASE_PATH", "/"),
)
