"""任务路由

POST   /projects/{id}/tasks   在项目中创建任务
GET    /tasks                 精确筛选（project_id / assigned_to / status / priority）
GET    /tasks/due             截止时间范围（before / after）
GET    /tasks/overdue         已逾期且未关闭的任务
GET    /tasks/search          标题 / 描述子串查询
GET    /tasks/{id}            任务详情
PUT    /tasks/{id}            修改标题 / 描述
POST   /tasks/{id}/start|complete|cancel|reopen  状态流转
PUT    /tasks/{id}/assignee   指派；DELETE 取消指派
PUT    /tasks/{id}/priority   修改优先级
PUT    /tasks/{id}/due-date   修改 / 清除截止时间
DELETE /tasks/{id}            从项目中移除（记录随之删除）
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from taskflow.core.models import Task, TaskPriority, TaskStatus

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


class CreateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    assigned_to_id: int | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class AssignRequest(BaseModel):
    user_id: int


class PriorityRequest(BaseModel):
    priority: TaskPriority | None = None


class DueDateRequest(BaseModel):
    due_date: datetime | None = None


class TaskResponse(BaseModel):
    """任务视图"""

    id: int
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    project_id: int | None
    assigned_to_id: int | None
    overdue: bool
    days_until_due: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            project_id=task.project_id,
            assigned_to_id=task.assigned_to_id,
            overdue=task.is_overdue(),
            days_until_due=task.days_until_due,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]


def _list_response(tasks: list[Task]) -> TaskListResponse:
    return TaskListResponse(tasks=[TaskResponse.from_task(t) for t in tasks])


@router.post("/projects/{project_id}/tasks", status_code=201, response_model=TaskResponse)
async def create_task(
    project_id: int,
    body: CreateTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    task = await service.create_task(
        project_id,
        body.title,
        body.description,
        assigned_to_id=body.assigned_to_id,
        priority=body.priority,
        due_date=body.due_date,
    )
    return TaskResponse.from_task(task)


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    project_id: int | None = Query(default=None),
    assigned_to: int | None = Query(default=None),
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    service: TaskService = Depends(get_task_service),
):
    """所有筛选条件取交集，按 id 正序"""
    return _list_response(await service.list_tasks(project_id, assigned_to, status, priority))


@router.get("/tasks/due", response_model=TaskListResponse)
async def list_due_tasks(
    before: datetime | None = Query(default=None, description="截止时间早于"),
    after: datetime | None = Query(default=None, description="截止时间晚于"),
    service: TaskService = Depends(get_task_service),
):
    """两端都给出时为闭区间 [after, before]"""
    return _list_response(await service.list_due(before=before, after=after))


@router.get("/tasks/overdue", response_model=TaskListResponse)
async def list_overdue_tasks(service: TaskService = Depends(get_task_service)):
    return _list_response(await service.list_overdue())


@router.get("/tasks/search", response_model=TaskListResponse)
async def search_tasks(
    title: str | None = Query(default=None),
    description: str | None = Query(default=None),
    service: TaskService = Depends(get_task_service),
):
    return _list_response(await service.search_tasks(title, description))


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.get_task(task_id))


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    body: UpdateTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.from_task(
        await service.update_task(task_id, body.title, body.description)
    )


@router.post("/tasks/{task_id}/start", response_model=TaskResponse)
async def start_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.start_task(task_id))


@router.post("/tasks/{task_id}/complete", response_model=TaskResponse)
async def complete_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.complete_task(task_id))


@router.post("/tasks/{task_id}/cancel", response_model=TaskResponse)
async def cancel_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.cancel_task(task_id))


@router.post("/tasks/{task_id}/reopen", response_model=TaskResponse)
async def reopen_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.reopen_task(task_id))


@router.put("/tasks/{task_id}/assignee", response_model=TaskResponse)
async def assign_task(
    task_id: int,
    body: AssignRequest,
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.from_task(await service.assign_task(task_id, body.user_id))


@router.delete("/tasks/{task_id}/assignee", response_model=TaskResponse)
async def unassign_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return TaskResponse.from_task(await service.unassign_task(task_id))


@router.put("/tasks/{task_id}/priority", response_model=TaskResponse)
async def change_priority(
    task_id: int,
    body: PriorityRequest,
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.from_task(await service.change_priority(task_id, body.priority))


@router.put("/tasks/{task_id}/due-date", response_model=TaskResponse)
async def update_due_date(
    task_id: int,
    body: DueDateRequest,
    service: TaskService = Depends(get_task_service),
):
    """due_date 为 null 时清除截止时间"""
    return TaskResponse.from_task(await service.update_due_date(task_id, body.due_date))


@router.delete("/tasks/{task_id}", status_code=204)
async def remove_task(task_id: int, service: TaskService = Depends(get_task_service)):
    await service.remove_task(task_id)
    return Response(status_code=204)
