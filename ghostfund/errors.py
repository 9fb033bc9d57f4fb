"""
业务异常定义
每个异常携带对应的 HTTP 状态码，由 main.py 中的异常处理器统一渲染为
{"success": false, "message": ...}
"""


class GhostFundError(Exception):
    """业务异常基类"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(GhostFundError):
    """缺少必填字段或字段格式不合法"""
    status_code = 400


class ProjectNotFound(GhostFundError):
    status_code = 404

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class PermissionDenied(GhostFundError):
    status_code = 403


class InvalidProjectState(GhostFundError):
    """项目状态不允许当前操作（例如资助已完成募资的项目）"""
    status_code = 400

    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


class UpstreamServiceError(GhostFundError):
    """区块链服务或 AI 服务不可用"""
    status_code = 500
