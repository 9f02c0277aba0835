"""用户路由

POST   /users                      注册用户
GET    /users                      用户列表（status 筛选）
GET    /users/search               username / first_name / last_name 子串查询
GET    /users/by-username/{name}   按用户名查询
GET    /users/by-email/{email}     按邮箱查询
GET    /users/{id}                 用户详情
POST   /users/{id}/activate        激活
POST   /users/{id}/deactivate      停用（拥有 ACTIVE 项目时 422）
PUT    /users/{id}/profile         修改姓名
PUT    /users/{id}/password        修改密码
DELETE /users/{id}                 删除（级联删除项目与任务）
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from taskflow.core.models import User, UserStatus

from ..deps import get_user_service
from ..services.user_service import UserService

router = APIRouter(prefix="/users")


class CreateUserRequest(BaseModel):
    """注册请求；字段校验由领域层完成"""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class UpdateProfileRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str | None = None
    new_password: str | None = None


class UserResponse(BaseModel):
    """用户视图（不含密码）"""

    id: int
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    full_name: str
    status: UserStatus
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            status=user.status,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    users: list[UserResponse]


def _list_response(users: list[User]) -> UserListResponse:
    return UserListResponse(users=[UserResponse.from_user(u) for u in users])


@router.post("", status_code=201, response_model=UserResponse)
async def create_user(
    body: CreateUserRequest,
    service: UserService = Depends(get_user_service),
):
    user = await service.create_user(
        body.username, body.email, body.password, body.first_name, body.last_name
    )
    return UserResponse.from_user(user)


@router.get("", response_model=UserListResponse)
async def list_users(
    status: UserStatus | None = Query(default=None, description="按状态筛选"),
    service: UserService = Depends(get_user_service),
):
    """查询用户列表，按 id 正序"""
    return _list_response(await service.list_users(status))


@router.get("/search", response_model=UserListResponse)
async def search_users(
    q: str = Query(min_length=1, description="子串，大小写不敏感"),
    field: Literal["username", "first_name", "last_name"] = Query(default="username"),
    service: UserService = Depends(get_user_service),
):
    return _list_response(await service.search_users(field, q))


@router.get("/by-username/{username}", response_model=UserResponse)
async def get_user_by_username(
    username: str,
    service: UserService = Depends(get_user_service),
):
    return UserResponse.from_user(await service.find_by_username(username))


@router.get("/by-email/{email}", response_model=UserResponse)
async def get_user_by_email(
    email: str,
    service: UserService = Depends(get_user_service),
):
    return UserResponse.from_user(await service.find_by_email(email))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return UserResponse.from_user(await service.get_user(user_id))


@router.post("/{user_id}/activate", response_model=UserResponse)
async def activate_user(user_id: int, service: UserService = Depends(get_user_service)):
    return UserResponse.from_user(await service.activate_user(user_id))


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(user_id: int, service: UserService = Depends(get_user_service)):
    return UserResponse.from_user(await service.deactivate_user(user_id))


@router.put("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: int,
    body: UpdateProfileRequest,
    service: UserService = Depends(get_user_service),
):
    user = await service.update_profile(user_id, body.first_name, body.last_name)
    return UserResponse.from_user(user)


@router.put("/{user_id}/password", status_code=204)
async def change_password(
    user_id: int,
    body: ChangePasswordRequest,
    service: UserService = Depends(get_user_service),
):
    await service.change_password(user_id, body.current_password, body.new_password)
    return Response(status_code=204)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return Response(status_code=204)
