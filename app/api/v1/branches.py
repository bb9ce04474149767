"""Branch endpoints: public listing plus permission-gated CRUD."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import require_permissions
from app.core.database import get_db
from app.models import Branch
from app.schemas.auth import CurrentUser
from app.schemas.branch import BranchesResponse, BranchIn, BranchOut, MessageResponse
from app.services.permissions import MANAGE_BRANCHES, MANAGE_LIBRARY_STUDENTS

router = APIRouter()

# Staff who manage students need the branch list for their forms.
can_read_branches = require_permissions([MANAGE_BRANCHES, MANAGE_LIBRARY_STUDENTS], "OR")
can_manage_branches = require_permissions([MANAGE_BRANCHES])


def _require_name(body: BranchIn) -> str:
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Branch name is required",
        )
    return name


def _get_branch_or_404(db: Session, branch_id: int) -> Branch:
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found")
    return branch


@router.get("/public", response_model=BranchesResponse)
def list_public_branches(db: Annotated[Session, Depends(get_db)]) -> BranchesResponse:
    """Branch id, name and code for the public registration form. No authentication."""
    branches = db.query(Branch).order_by(Branch.id.asc()).all()
    return BranchesResponse(branches=[BranchOut.model_validate(b) for b in branches])


@router.get("", response_model=BranchesResponse)
def list_branches(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(can_read_branches)],
) -> BranchesResponse:
    branches = db.query(Branch).order_by(Branch.name).all()
    return BranchesResponse(branches=[BranchOut.model_validate(b) for b in branches])


@router.post("", response_model=BranchOut, status_code=status.HTTP_201_CREATED)
def create_branch(
    body: BranchIn,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(can_manage_branches)],
) -> BranchOut:
    branch = Branch(name=_require_name(body), code=body.code or None)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return BranchOut.model_validate(branch)


@router.put("/{branch_id}", response_model=BranchOut)
def update_branch(
    branch_id: int,
    body: BranchIn,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(can_manage_branches)],
) -> BranchOut:
    name = _require_name(body)
    branch = _get_branch_or_404(db, branch_id)
    branch.name = name
    branch.code = body.code or None
    db.commit()
    db.refresh(branch)
    return BranchOut.model_validate(branch)


@router.delete("/{branch_id}", response_model=MessageResponse)
def delete_branch(
    branch_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(can_manage_branches)],
) -> MessageResponse:
    branch = _get_branch_or_404(db, branch_id)
    db.delete(branch)
    db.commit()
    return MessageResponse(message="Branch deleted")
