from typing import List

from linkhub_app.models.user import User
from linkhub_app.schemas.common import CamelModel


class UserListResponse(CamelModel):
    total: int
    users: List[User]
