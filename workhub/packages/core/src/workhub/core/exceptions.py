"""任务引擎异常体系

所有业务异常继承 TaskEngineError，携带稳定的错误码和是否可重试标记，
由调用方（如 gateway）映射为对外错误响应。
"""


class TaskEngineError(Exception):
    """任务引擎基础异常"""

    code: str = "TASK_ENGINE_ERROR"

    def __init__(self, message: str, retryable: bool = False) -> None:
        """
        Args:
            message: 错误描述（可直接展示给调用方）
            retryable: 是否可以在刷新状态后重试
        """
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class ValidationError(TaskEngineError):
    """输入缺失或格式非法，不应重试"""

    code = "VALIDATION_ERROR"


class InvalidTransitionError(TaskEngineError):
    """状态流转不在当前角色的流转表内"""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}"
        )
        self.from_status = from_status
        self.to_status = to_status


class ForbiddenError(TaskEngineError):
    """角色或可见范围不允许该操作

    消息保持通用，不泄露范围外任务的任何细节。
    """

    code = "FORBIDDEN"

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message)


class NotFoundError(TaskEngineError):
    """任务不存在，或不在调用者可见范围内（两者不作区分）"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class ConflictError(TaskEngineError):
    """并发修改冲突 -- 使用最新状态重试一次即可"""

    code = "CONFLICT"

    def __init__(self, task_id: str) -> None:
        super().__init__(
            f"Task {task_id} was modified concurrently, reload and retry",
            retryable=True,
        )
        self.task_id = task_id


class InvalidStateError(TaskEngineError):
    """当前生命周期位置不允许该操作（如删除非 todo 任务）"""

    code = "INVALID_STATE"
