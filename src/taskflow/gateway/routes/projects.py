"""项目路由

POST   /projects                  为所有者创建项目
GET    /projects                  项目列表（owner_id / status 筛选）
GET    /projects/search           名称 / 描述子串查询
GET    /projects/{id}             项目详情（含任务摘要与进度）
PUT    /projects/{id}             修改名称 / 描述
POST   /projects/{id}/complete    完成（存在未完成任务时 422）
POST   /projects/{id}/archive     归档
POST   /projects/{id}/reactivate  重新激活
DELETE /projects/{id}             删除（级联删除任务）
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from taskflow.core.config import get_task_title_preview_length
from taskflow.core.models import Project, ProjectStatus, Task, TaskPriority, TaskStatus, TaskTitle

from ..deps import get_project_service
from ..services.project_service import ProjectService

router = APIRouter(prefix="/projects")


class CreateProjectRequest(BaseModel):
    owner_id: int
    name: str | None = None
    description: str | None = None


class UpdateProjectRequest(BaseModel):
    name: str | None = None
    description: str | None = None


class TaskSummary(BaseModel):
    """项目详情中内联的任务摘要"""

    id: int
    title_preview: str
    status: TaskStatus
    priority: TaskPriority
    assigned_to_id: int | None

    @classmethod
    def from_task(cls, task: Task) -> "TaskSummary":
        return cls(
            id=task.id,
            title_preview=TaskTitle.of(task.title).truncated(get_task_title_preview_length()),
            status=task.status,
            priority=task.priority,
            assigned_to_id=task.assigned_to_id,
        )


class ProjectResponse(BaseModel):
    """项目视图 -- 含任务统计"""

    id: int
    name: str
    description: str | None
    status: ProjectStatus
    owner_id: int | None
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    progress: float
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            status=project.status,
            owner_id=project.owner_id,
            total_tasks=project.total_tasks,
            completed_tasks=project.completed_tasks,
            pending_tasks=project.pending_tasks,
            progress=project.progress,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectDetailResponse(ProjectResponse):
    tasks: list[TaskSummary]

    @classmethod
    def from_project(cls, project: Project) -> "ProjectDetailResponse":
        base = ProjectResponse.from_project(project)
        return cls(
            **base.model_dump(),
            tasks=[TaskSummary.from_task(t) for t in project.tasks],
        )


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]


@router.post("", status_code=201, response_model=ProjectResponse)
async def create_project(
    body: CreateProjectRequest,
    service: ProjectService = Depends(get_project_service),
):
    project = await service.create_project(body.owner_id, body.name, body.description)
    return ProjectResponse.from_project(project)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    owner_id: int | None = Query(default=None, description="按所有者筛选"),
    status: ProjectStatus | None = Query(default=None, description="按状态筛选"),
    service: ProjectService = Depends(get_project_service),
):
    projects = await service.list_projects(owner_id, status)
    return ProjectListResponse(projects=[ProjectResponse.from_project(p) for p in projects])


@router.get("/search", response_model=ProjectListResponse)
async def search_projects(
    name: str | None = Query(default=None),
    description: str | None = Query(default=None),
    service: ProjectService = Depends(get_project_service),
):
    projects = await service.search_projects(name, description)
    return ProjectListResponse(projects=[ProjectResponse.from_project(p) for p in projects])


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
):
    return ProjectDetailResponse.from_project(await service.get_project(project_id))


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    body: UpdateProjectRequest,
    service: ProjectService = Depends(get_project_service),
):
    project = await service.update_project(project_id, body.name, body.description)
    return ProjectResponse.from_project(project)


@router.post("/{project_id}/complete", response_model=ProjectResponse)
async def complete_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
):
    return ProjectResponse.from_project(await service.complete_project(project_id))


@router.post("/{project_id}/archive", response_model=ProjectResponse)
async def archive_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
):
    return ProjectResponse.from_project(await service.archive_project(project_id))


@router.post("/{project_id}/reactivate", response_model=ProjectResponse)
async def reactivate_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
):
    return ProjectResponse.from_project(await service.reactivate_project(project_id))


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
):
    await service.delete_project(project_id)
    return Response(status_code=204)
