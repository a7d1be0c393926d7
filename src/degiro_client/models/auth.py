"""Login and client-binding payloads."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from degiro_client.models.base import DegiroModel

LOGIN_STATUS_SUCCESS = 0


class TotpLoginRequest(DegiroModel):
    username: str
    password: str = Field(repr=False)
    query_params: dict[str, Any] = Field(default_factory=dict)
    one_time_password: str = Field(repr=False)
    save_device: bool = False


class TotpLoginResponse(DegiroModel):
    session_id: str | None = None
    status: int | None = None
    status_text: str | None = None
    captcha_required: bool | None = None
    is_pass_code_enabled: bool | None = None
    locale: str | None = None
    redirect_url: str | None = None
    user_tokens: list[Any] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.session_id) and self.status in (None, LOGIN_STATUS_SUCCESS)


class ClientData(DegiroModel):
    int_account: int
    id: int | None = None
    username: str | None = None
    email: str | None = None
    client_role: str | None = None
    display_name: str | None = None


class ClientResponse(DegiroModel):
    data: ClientData
