"""Uvicorn server runner with custom configuration."""

from typing import Any

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from meetmogger.app import App
from meetmogger.config import Config
from meetmogger.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def build_log_config() -> dict[str, Any]:
    """Uvicorn logging config with compact access and default formats."""
    log_config = LOGGING_CONFIG.copy()
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    return log_config


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server, logging where it listens and which LLM model it uses."""
    fastapi_app = create_fastapi_app(app, config)

    logger.info(
        "server_starting",
        host=config.host,
        port=config.port,
        health_url=f"http://{config.host}:{config.port}/api/health",
        llm_model=config.llm_model,
        llm_configured=bool(config.llm_api_key),
        cors_origins=config.cors_origins,
    )
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=build_log_config(), access_log=True)
