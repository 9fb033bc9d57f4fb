"""
项目管理 API
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from ghostfund.context import AppContext, get_context
from ghostfund.models.project import (
    CancelRequest,
    DescriptionRequest,
    FundRequest,
    PrivateFundRequest,
    ProjectCreate,
    serialize_project,
)

router = APIRouter(prefix="/api/projects", tags=["项目管理"])


@router.get("")
async def list_projects(
    status: Optional[str] = Query(None, description="状态筛选，all 表示不筛选"),
    category: Optional[str] = Query(None, description="分类筛选，all 表示不筛选"),
    search: Optional[str] = Query(None, description="标题或描述关键字"),
    ctx: AppContext = Depends(get_context),
):
    """获取项目列表（最多 100 条，按创建时间倒序）"""
    docs = await ctx.projects.list_projects(status=status, category=category, search=search)
    return {"success": True, "projects": [serialize_project(d) for d in docs]}


@router.post("", status_code=201)
async def create_project(project: ProjectCreate, ctx: AppContext = Depends(get_context)):
    """创建新项目"""
    result = await ctx.projects.create(project)
    return {
        "success": True,
        "message": "Project created successfully",
        "project": serialize_project(result.project),
        "linked": result.linked,
    }


@router.post("/fund")
async def fund_project(body: FundRequest, ctx: AppContext = Depends(get_context)):
    """资助项目"""
    result = await ctx.projects.fund(body.project_id, body.amount, body.funder_address)
    return {
        "success": True,
        "message": "Project funded successfully",
        "transaction": result.transaction,
        "project": serialize_project(result.project),
    }


@router.post("/private-fund")
async def private_fund_project(body: PrivateFundRequest, ctx: AppContext = Depends(get_context)):
    """生成隐私资助的存款地址与凭证"""
    details = await ctx.projects.private_fund(body.project_id, body.amount)
    return {"success": True, **details}


@router.post("/analyze")
async def analyze_project(body: DescriptionRequest, ctx: AppContext = Depends(get_context)):
    """AI 风险分析"""
    analysis = await ctx.ai.analyze_project_risk(body.description)
    return {
        "success": True,
        "analysis": analysis.analysis,
        "riskScore": analysis.risk_score,
        "recommendation": analysis.recommendation,
    }


@router.post("/suggestions")
async def project_suggestions(body: DescriptionRequest, ctx: AppContext = Depends(get_context)):
    """AI 改进建议"""
    suggestions = await ctx.ai.generate_project_suggestions(body.description)
    return {"success": True, "suggestions": suggestions}


@router.get("/{project_id}")
async def get_project(project_id: str, ctx: AppContext = Depends(get_context)):
    """获取单个项目"""
    doc = await ctx.projects.get_by_id(project_id)
    return {"success": True, "project": serialize_project(doc)}


@router.get("/{project_id}/chain")
async def get_project_chain_details(project_id: str, ctx: AppContext = Depends(get_context)):
    """查询项目的链上信息"""
    info = await ctx.projects.chain_details(project_id)
    return {"success": True, **info}


@router.post("/{project_id}/cancel")
async def cancel_project(
    project_id: str, body: CancelRequest, ctx: AppContext = Depends(get_context)
):
    """取消项目（仅发起人）"""
    doc = await ctx.projects.cancel(project_id, body.owner_address)
    return {
        "success": True,
        "message": "Project cancelled",
        "project": serialize_project(doc),
    }
