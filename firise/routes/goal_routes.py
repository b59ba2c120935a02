from fastapi import APIRouter, Depends, HTTPException, Response

from firise.auth import get_current_user
from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import internal_error
from firise.schemas import Goal, GoalCreate, GoalsSummary, GoalUpdate
from firise.services import finance_service
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/goals", tags=["Goals"])


def owned_goal(storage: Storage, goal_id: int, user_id: int) -> Goal:
    goal = storage.get_goal(goal_id)
    if not goal or goal.user_id != user_id:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


@router.get("", response_model=list[Goal])
def list_goals(storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        return storage.get_goals(user_id)
    except Exception:
        raise internal_error("listing goals")


@router.get("/summary", response_model=GoalsSummary)
def goals_summary(storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    """Each goal with its progress percentage and status label."""
    try:
        return finance_service.goals_summary(storage.get_goals(user_id))
    except Exception:
        raise internal_error("summarising goals")


@router.get("/{goal_id}", response_model=Goal)
def get_goal(goal_id: int, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        return owned_goal(storage, goal_id, user_id)
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"reading goal {goal_id}")


@router.post("", response_model=Goal, status_code=201)
def create_goal(payload: GoalCreate, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        return storage.create_goal(user_id, payload)
    except Exception:
        raise internal_error("creating goal")


@router.put("/{goal_id}", response_model=Goal)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    try:
        existing = owned_goal(storage, goal_id, user_id)

        data = payload.model_dump(exclude_unset=True)
        if not data:
            return existing

        updated = storage.update_goal(goal_id, data)
        if updated is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        return updated
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"updating goal {goal_id}")


@router.delete("/{goal_id}", status_code=204)
def delete_goal(goal_id: int, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        owned_goal(storage, goal_id, user_id)
        if not storage.delete_goal(goal_id):
            raise HTTPException(status_code=404, detail="Goal not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"deleting goal {goal_id}")
