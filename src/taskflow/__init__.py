"""TaskFlow -- 用户 / 项目 / 任务管理服务"""

__version__ = "0.1.0"
