from datetime import datetime, timezone

from flask import Blueprint

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            ok:
              type: boolean
              example: true
            app:
              type: string
              example: sociala
            time:
              type: string
              example: "2024-01-01T00:00:00+00:00"
    """
    return {"ok": True, "app": "sociala", "time": datetime.now(timezone.utc).isoformat()}, 200
