from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..database import serialize_doc
from ..errors import NotFound, WrongPassword
from ..payloads import ChangePassword, CreateUser, Login, UpdateUser, parse_payload
from ..repositories import UserRepository, contains, get_user_repository
from ..schemas import User as UserSchema, full_name
from ..security import TokenService, get_current_user, get_token_service, hash_password, verify_password

router = APIRouter(tags=["users"])


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    user = serialize_doc(doc)
    # Never send password hash
    user.pop("passwordHash", None)
    return user


@router.get("/users")
def get_users(
    name: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(5, ge=1, alias="perPage"),
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    query: Dict[str, Any] = {}
    name_filter = contains(name)
    if name_filter:
        query["fullName"] = name_filter
    result = users.paginate(query, page, per_page)
    result["data"] = [public_user(doc) for doc in result["data"]]
    return {"success": True, "message": "Users fetched successfully", **result}


@router.get("/user/me")
def get_me(current_user: dict = Depends(get_current_user)):
    return {"success": True, "message": "User fetched successfully", "data": public_user(current_user)}


@router.get("/user/{user_id}")
def get_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    user = users.get(user_id)
    return {"success": True, "message": "User fetched successfully", "data": public_user(user)}


@router.post("/user")
def create_user(body: Dict[str, Any] = Body(...), users: UserRepository = Depends(get_user_repository)):
    payload = parse_payload(CreateUser, body)
    user = users.create(
        UserSchema(
            first_name=payload.first_name,
            last_name=payload.last_name,
            full_name=full_name(payload.first_name, payload.last_name),
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
        )
    )
    return {"success": True, "message": "User created", "data": public_user(user)}


@router.post("/login")
def login(
    body: Dict[str, Any] = Body(...),
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    payload = parse_payload(Login, body)
    user = users.find_by_email(payload.email.lower())
    # Unknown email and wrong password get the same answer
    if not user or not verify_password(payload.password, user.get("passwordHash", "")):
        raise NotFound("incorrect login details")
    token = tokens.issue(str(user["_id"]))
    return {"success": True, "message": "login successful", "data": public_user(user), "token": token}


@router.put("/user/update/{user_id}")
def update_user(
    user_id: str,
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    payload = parse_payload(UpdateUser, body)
    user = users.update(
        user_id,
        {
            "firstName": payload.first_name,
            "lastName": payload.last_name,
            "fullName": full_name(payload.first_name, payload.last_name),
        },
    )
    if not user:
        raise NotFound("User not found")
    return {"success": True, "message": "user update successful", "data": public_user(user)}


@router.put("/user/password")
def change_password(
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    payload = parse_payload(ChangePassword, body)
    if not verify_password(payload.old_password, current_user.get("passwordHash", "")):
        raise WrongPassword()
    user = users.update(current_user["_id"], {"passwordHash": hash_password(payload.new_password)})
    if not user:
        raise NotFound("User not found")
    return {"success": True, "message": "Password changed successfully", "data": public_user(user)}


@router.delete("/user/delete/{user_id}")
def delete_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    users.delete(user_id)
    return {"success": True, "message": "user deleted!"}
