# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from gymdash.auth import users as user_admin
from gymdash.auth.authority import SessionAuthority
from gymdash.auth.models import PublicUser
from gymdash.auth.session import clear_session_cookie, set_session_cookie, unsign_token
from gymdash.config import Settings, load_settings
from gymdash.core.errors import AuthError, EmailAlreadyRegistered, MissingToken, NotFound, StorageFailure
from gymdash.core.utils import df_to_csv_stream, utcnow
from gymdash.infra.credential_repo import SqliteCredentialStore
from gymdash.infra.database import open_db
from gymdash.infra.member_repo import MemberRepo, SettingsRepo
from gymdash.infra.session_repo import SqliteSessionStore
from gymdash.permissions import get_authority, require_role, require_user, session_cookie
from gymdash.services import member_service, profit_service

log = logging.getLogger(__name__)


class LoginBody(BaseModel):
    email: str
    password: str


class ChangePasswordBody(BaseModel):
    oldPassword: str
    newPassword: str


def _bad_request(e: ValueError) -> PlainTextResponse:
    return PlainTextResponse(str(e), status_code=400)


def create_app(settings: Optional[Settings] = None, *, clock: Callable[[], datetime] = utcnow) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = await open_db(settings.db_path)
        credentials = SqliteCredentialStore(db)
        app.state.db = db
        app.state.credentials = credentials
        app.state.members = MemberRepo(db)
        app.state.pricing = SettingsRepo(db)
        app.state.authority = SessionAuthority(
            credentials,
            SqliteSessionStore(db),
            ttl=timedelta(hours=settings.session_hours),
            clock=clock,
        )
        log.info("gymdash started (env=%s, db=%s)", settings.env, settings.db_path)
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(title="gymdash", lifespan=lifespan)
    app.state.settings = settings

    # ------------------ Error mapping ------------------

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(EmailAlreadyRegistered)
    async def _email_taken(request: Request, exc: EmailAlreadyRegistered):
        return PlainTextResponse("Email already registered", status_code=409)

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return PlainTextResponse(str(exc) or "Not found", status_code=404)

    @app.exception_handler(StorageFailure)
    async def _storage_failure(request: Request, exc: StorageFailure):
        log.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse("Internal Server Error", status_code=500)

    # ------------------ Auth ------------------

    @app.post("/api/auth/login")
    async def login(body: LoginBody, authority: SessionAuthority = Depends(get_authority)):
        user, record = await authority.login(body.email, body.password)
        resp = JSONResponse(user.to_dict())
        set_session_cookie(resp, settings, record)
        return resp

    @app.post("/api/auth/logout")
    async def logout(request: Request, authority: SessionAuthority = Depends(get_authority)):
        raw = session_cookie(request)
        if not raw:
            raise MissingToken()
        token = unsign_token(settings, raw)
        if token:
            await authority.revoke_session(token)
        resp = PlainTextResponse("Logged out")
        clear_session_cookie(resp, settings)
        log.info("Logout")
        return resp

    @app.get("/api/auth/me")
    async def me(user: PublicUser = Depends(require_user)):
        return user.to_dict()

    @app.put("/api/auth/change-password")
    async def change_password(
        body: ChangePasswordBody,
        user: PublicUser = Depends(require_user),
        authority: SessionAuthority = Depends(get_authority),
    ):
        try:
            await authority.change_password(user.id, body.oldPassword, body.newPassword)
        except ValueError as e:
            return _bad_request(e)
        return Response(status_code=204)

    @app.post("/api/auth/signup", status_code=201)
    async def signup(request: Request, body: LoginBody):
        if not settings.allow_signup:
            return PlainTextResponse("Signup disabled", status_code=403)
        try:
            user_id = await user_admin.signup_admin(request.app.state.credentials, body.email, body.password)
        except ValueError as e:
            return _bad_request(e)
        return {"id": user_id}

    # ------------------ Assistants ------------------

    @app.get("/api/users/assistants")
    async def assistants_list(request: Request, admin: PublicUser = Depends(require_role("admin"))):
        assistants = await user_admin.list_assistants(request.app.state.credentials, admin)
        return [{"id": a.id, "email": a.email, "role": a.role} for a in assistants]

    @app.post("/api/users/assistants", status_code=201)
    async def assistants_create(
        request: Request, body: LoginBody, admin: PublicUser = Depends(require_role("admin"))
    ):
        try:
            user_id = await user_admin.create_assistant(
                request.app.state.credentials, admin, body.email, body.password
            )
        except ValueError as e:
            return _bad_request(e)
        return {"id": user_id}

    @app.delete("/api/users/assistants/{user_id}")
    async def assistants_delete(
        request: Request, user_id: int, admin: PublicUser = Depends(require_role("admin"))
    ):
        await user_admin.delete_assistant(request.app.state.credentials, admin, user_id)
        return Response(status_code=204)

    # ------------------ Members ------------------

    @app.get("/api/members")
    async def members_list(request: Request, user: PublicUser = Depends(require_user)):
        return await member_service.list_members(request.app.state.members)

    @app.post("/api/members")
    async def members_create(
        request: Request, data: Dict[str, Any] = Body(...), user: PublicUser = Depends(require_user)
    ):
        try:
            member_id = await member_service.create_member(request.app.state.members, data)
        except ValueError as e:
            return _bad_request(e)
        return {"id": member_id}

    @app.get("/api/members/export.csv")
    async def members_export(request: Request, user: PublicUser = Depends(require_user)):
        df = await member_service.members_frame(request.app.state.members)
        return df_to_csv_stream(df, filename="members.csv")

    @app.get("/api/members/{member_id}")
    async def members_get(request: Request, member_id: int, user: PublicUser = Depends(require_user)):
        return await member_service.get_member(request.app.state.members, member_id)

    @app.put("/api/members/{member_id}")
    async def members_update(
        request: Request,
        member_id: int,
        data: Dict[str, Any] = Body(...),
        user: PublicUser = Depends(require_user),
    ):
        try:
            await member_service.update_member(request.app.state.members, member_id, data)
        except ValueError as e:
            return _bad_request(e)
        return Response(status_code=204)

    @app.delete("/api/members/{member_id}")
    async def members_delete(request: Request, member_id: int, user: PublicUser = Depends(require_user)):
        await request.app.state.members.delete(member_id)
        return Response(status_code=204)

    @app.get("/api/public/members/{member_id}")
    async def members_public(request: Request, member_id: int):
        return await member_service.public_profile(request.app.state.members, member_id, clock())

    # ------------------ Pricing & profits ------------------

    @app.get("/api/settings")
    async def settings_get(request: Request, user: PublicUser = Depends(require_user)):
        return await request.app.state.pricing.get_pricing()

    @app.post("/api/settings")
    async def settings_save(
        request: Request, data: Any = Body(...), admin: PublicUser = Depends(require_role("admin"))
    ):
        try:
            pricing = profit_service.validate_pricing(data)
        except ValueError as e:
            return _bad_request(e)
        await request.app.state.pricing.save_pricing(pricing)
        return Response(status_code=204)

    @app.get("/api/profits")
    async def profits(request: Request, admin: PublicUser = Depends(require_role("admin"))):
        return await profit_service.profit_stats(request.app.state.members, request.app.state.pricing)

    return app
