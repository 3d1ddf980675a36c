"""Start the worker: python -m research_worker"""

import uvicorn

from research_worker.config import ENGINE_NAME, get_settings, log


def main() -> None:
    settings = get_settings()
    log("INFO", f"{ENGINE_NAME} running", host=settings.host, port=settings.port, research_mode=settings.research_mode)
    uvicorn.run("research_worker.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
