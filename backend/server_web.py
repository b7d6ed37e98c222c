# backend/server_web.py
import logging

import uvicorn

from nail_arena.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).info("Serving Nail Arena API (memory store: %s)", settings.use_memory_store)
    uvicorn.run("nail_arena.main:app", host="0.0.0.0", port=8000, reload=True)
