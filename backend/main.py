"""
BoroughWatch Backend: FastAPI entry point.
Logic is split across:
  config.py, topology.py, regions.py, police_api.py, store.py, cache.py,
  aggregates.py, months.py, trends.py, services.py, routes.py
"""

import logging

logging.basicConfig(level=logging.INFO)

from routes import app  # noqa: F401,E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
