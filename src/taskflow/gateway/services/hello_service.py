"""HelloService -- 问候与应用信息"""

from datetime import UTC, datetime

import structlog
from taskflow.core.config import APP_NAME, APP_VERSION

log = structlog.get_logger()


class HelloService:
    """演示用问候服务"""

    def get_greeting(self) -> str:
        log.debug("greeting_generated")
        return "Hello from TaskFlow API! Welcome to our task management system."

    def get_personalized_greeting(self, name: str | None) -> str:
        """空白名称退化为基础问候"""
        if name is None or not name.strip():
            return self.get_greeting()
        log.debug("personalized_greeting_generated", name=name.strip())
        return f"Hello {name.strip()}! Welcome to TaskFlow API. Ready to manage your tasks?"

    def get_application_info(self) -> str:
        return f"{APP_NAME} v{APP_VERSION} - task management domain service"

    def health(self) -> dict:
        return {
            "status": "UP",
            "application": APP_NAME,
            "version": APP_VERSION,
            "timestamp": datetime.now(UTC).isoformat(),
        }
