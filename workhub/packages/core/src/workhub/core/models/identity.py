"""身份与目录模型

Actor 由外部身份服务按请求提供，显式传入每个引擎调用；
PersonInfo / DepartmentInfo 由外部目录服务提供，引擎只读取不持久化。
"""

from pydantic import BaseModel, Field

from .enums import ActorRole


class Actor(BaseModel):
    """调用者身份

    经理的 department_id 为其管理的部门；员工的为其所属部门。
    HR/管理员可以为空。
    """

    actor_id: str = Field(description="调用者 ID")
    role: ActorRole = Field(description="调用者角色")
    department_id: str | None = Field(default=None, description="部门 ID")


class PersonInfo(BaseModel):
    """目录服务中的人员信息"""

    person_id: str
    full_name: str
    email: str = Field(default="")
    role: ActorRole = Field(default=ActorRole.EMPLOYEE)
    department_id: str | None = Field(default=None)
    is_active: bool = Field(default=True)


class DepartmentInfo(BaseModel):
    """目录服务中的部门信息"""

    department_id: str
    name: str
    code: str = Field(default="")
    manager_id: str | None = Field(default=None)
