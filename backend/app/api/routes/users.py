from fastapi import APIRouter, Depends, Response, status
from app.api.deps import user_service
from app.schemas.user import UserCreate, UserUpdate, UserOut
from app.services.users import UserAccountService, UserChanges

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=list[UserOut])
def list_users(svc: UserAccountService = Depends(user_service)):
    return svc.list()

@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, svc: UserAccountService = Depends(user_service)):
    return svc.get_by_id(user_id)

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, svc: UserAccountService = Depends(user_service)):
    return svc.create(name=body.name, email=body.email, password=body.password, role=body.role)

@router.patch("/{user_id}", response_model=UserOut)
@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, body: UserUpdate, svc: UserAccountService = Depends(user_service)):
    changes = UserChanges(**body.model_dump(exclude_unset=True, exclude_none=True))
    return svc.update(user_id, changes)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, svc: UserAccountService = Depends(user_service)):
    svc.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
