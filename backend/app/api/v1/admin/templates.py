"""
Test template builder endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core import authoring
from app.core.db_error_handling import handle_db_error
from app.models import get_db
from app.schemas.admin import (
    MessageResponse,
    SectionAdminResponse,
    SectionUpdateRequest,
    TemplateCreateRequest,
    TemplateDetailResponse,
    TemplateResponse,
)

from ._dependencies import Principal, require_admin

router = APIRouter()


@router.post(
    "/templates",
    response_model=TemplateDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    request: TemplateCreateRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a template shell with empty LISTENING, READING and WRITING sections.
    """
    with handle_db_error(db, "create test template"):
        template = authoring.create_template(db, request.title, request.description)
        return TemplateDetailResponse.model_validate(template)


@router.patch(
    "/templates/{template_id}/sections/{section_type}",
    response_model=SectionAdminResponse,
)
def update_section(
    template_id: int,
    section_type: str,
    request: SectionUpdateRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Replace the content and/or answer key of one section of a template.
    """
    with handle_db_error(db, "update section"):
        section = authoring.update_section(
            db, template_id, section_type, request.content, request.answers
        )
        return SectionAdminResponse.model_validate(section)


@router.get("/templates", response_model=List[TemplateResponse])
def list_templates(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List all test templates, newest first."""
    with handle_db_error(db, "fetch test templates"):
        return [
            TemplateResponse.model_validate(template)
            for template in authoring.list_templates(db)
        ]


@router.get("/templates/{template_id}", response_model=TemplateDetailResponse)
def get_template(
    template_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Get a template with all sections and answer keys, for editing."""
    with handle_db_error(db, "fetch template"):
        return TemplateDetailResponse.model_validate(
            authoring.get_template(db, template_id)
        )


@router.delete("/templates/{template_id}", response_model=MessageResponse)
def delete_template(
    template_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a template together with its schedules, sections and attempts.
    """
    with handle_db_error(db, "delete test template"):
        authoring.delete_template(db, template_id)
        return MessageResponse(
            message="Test template and all its schedules deleted successfully."
        )
