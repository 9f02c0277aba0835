"""GatewayConfig -- Gateway 配置加载

从环境变量加载运行配置；非法值记录警告并回退到默认值，不阻塞启动。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, ValidationError

log = structlog.get_logger()


class GatewayConfig(BaseModel):
    """Gateway 配置 -- 从环境变量加载

    环境变量:
        TASKFLOW_PROFILE: 运行环境（dev/prod）
        TASKFLOW_DEFAULT_GREETING_NAME: personalized 问候缺省名称
    """

    profile: Literal["dev", "prod"] = Field(
        default="dev",
        description="运行环境：dev / prod",
    )
    default_greeting_name: str = Field(
        default="World",
        min_length=1,
        description="未提供 name 参数时使用的名称",
    )


def load_gateway_config() -> GatewayConfig:
    """从环境变量加载 Gateway 配置

    环境变量映射:
        TASKFLOW_PROFILE -> profile (默认 "dev")
        TASKFLOW_DEFAULT_GREETING_NAME -> default_greeting_name (默认 "World")

    Returns:
        GatewayConfig 实例
    """
    config = GatewayConfig()

    if val := os.environ.get("TASKFLOW_PROFILE"):
        try:
            config = config.model_copy(
                update={"profile": GatewayConfig(profile=val.lower()).profile}
            )
        except ValidationError:
            log.warning(
                "invalid_profile_config",
                env_var="TASKFLOW_PROFILE",
                value=val,
                fallback=config.profile,
            )

    if val := os.environ.get("TASKFLOW_DEFAULT_GREETING_NAME"):
        if val.strip():
            config = config.model_copy(update={"default_greeting_name": val.strip()})
        else:
            log.warning(
                "invalid_greeting_name_config",
                env_var="TASKFLOW_DEFAULT_GREETING_NAME",
                fallback=config.default_greeting_name,
            )

    return config
