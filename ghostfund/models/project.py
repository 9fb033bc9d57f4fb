"""
项目数据模型
MongoDB 文档使用 snake_case 字段，JSON 接口使用 camelCase 别名
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Literal
from datetime import datetime

from ghostfund.config import DEFAULT_DURATION_DAYS

ProjectStatus = Literal["draft", "active", "funded", "cancelled"]

# 可以接受资助 / 可以被取消的状态
FUNDABLE_STATUSES = ("active",)
CANCELLABLE_STATUSES = ("draft", "active")

CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "str_strip_whitespace": True,
}


class ProjectCreate(BaseModel):
    """创建项目的请求体"""
    title: str = Field(..., min_length=1, max_length=100, description="项目标题")
    description: str = Field(..., min_length=1, max_length=5000, description="项目描述")
    funding_goal: float = Field(..., gt=0, allow_inf_nan=False, description="募资目标")
    owner_address: str = Field(..., min_length=1, description="发起人钱包地址")
    duration: int = Field(DEFAULT_DURATION_DAYS, ge=1, description="募资天数")
    is_anonymous: bool = Field(False, description="是否匿名")
    category: Optional[str] = Field("other", max_length=50, description="分类")
    tags: list[str] = Field(default_factory=list, description="标签")

    model_config = CAMEL_CONFIG

    @field_validator("category")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return v or "other"

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        tags = [t.strip() for t in v if t and t.strip()]
        for tag in tags:
            if len(tag) > 50:
                raise ValueError("Tags cannot be more than 50 characters")
        return tags


class FundRequest(BaseModel):
    """资助项目的请求体"""
    project_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="资助金额")
    funder_address: str = Field(..., min_length=1, description="资助人钱包地址")

    model_config = CAMEL_CONFIG


class PrivateFundRequest(BaseModel):
    """生成隐私资助交易的请求体"""
    project_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)

    model_config = CAMEL_CONFIG


class CancelRequest(BaseModel):
    owner_address: str = Field(..., min_length=1)

    model_config = CAMEL_CONFIG


class DescriptionRequest(BaseModel):
    """AI 分析 / 建议接口的请求体"""
    description: str = Field(..., min_length=1, max_length=5000)

    model_config = CAMEL_CONFIG


class TransactionRecord(BaseModel):
    """单笔资助记录"""
    funder_address: str
    amount: float
    timestamp: datetime
    transaction_hash: Optional[str] = None

    model_config = CAMEL_CONFIG


class ProjectResponse(BaseModel):
    """项目响应模型"""
    id: str = Field(..., alias="_id")
    title: str
    description: str
    category: str = "other"
    tags: list[str] = Field(default_factory=list)
    is_anonymous: bool = False
    funding_goal: float
    current_funding: float = 0
    status: ProjectStatus = "draft"
    owner_address: str
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deadline: datetime
    transactions: list[TransactionRecord] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


def serialize_project(doc: dict) -> dict:
    """将 MongoDB 文档转换为 camelCase 的 JSON 字典"""
    return ProjectResponse.model_validate(doc).model_dump(by_alias=True, mode="json")
