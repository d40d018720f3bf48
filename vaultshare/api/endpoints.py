from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from loguru import logger

from vaultshare.api.auth import SESSION_KEY, SessionRegistry, is_authenticated, verify_session
from vaultshare.api.schemas import (
    CommentCreate,
    ContentUpdate,
    FolderCreate,
    ImageCreate,
    LinkCreate,
    NoteCreate,
)
from vaultshare.domain.vault import Vault
from vaultshare.errors import (
    CorruptVaultError,
    NotFoundError,
    NotLoggedInError,
    RecordingError,
    StoreUnavailableError,
    VaultConflictError,
    VaultError,
    VaultValidationError,
)
from vaultshare.session import VaultSession


def to_http_error(error: VaultError) -> HTTPException:
    """Map a vault error to the HTTP error reported to the client."""
    if isinstance(error, NotLoggedInError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(error))
    if isinstance(error, (VaultValidationError, RecordingError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, VaultConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, StoreUnavailableError):
        logger.error(f"Store unavailable: {error}")
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, CorruptVaultError):
        logger.error(f"Corrupt vault data: {error}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Stored vault is corrupt: {error}",
        )
    logger.error(f"Unexpected vault error: {error}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def dump_vault(vault: Vault) -> dict:
    return vault.model_dump(mode="json", by_alias=True)


def session_state(vault_session: VaultSession) -> dict:
    selected = vault_session.selected_note
    return {
        "logged_in": vault_session.is_logged_in,
        "username": vault_session.username,
        "vault_id": vault_session.vault_id,
        "save_status": vault_session.save_status.value,
        "selected_note": selected.model_dump(mode="json", by_alias=True) if selected else None,
        "expanded_folders": sorted(vault_session.expanded_folders),
    }


def get_endpoints_router() -> APIRouter:  # noqa: C901
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.post("/login")
    async def login(
        request: Request,
        username: str = Form(...),
        vault_id: str = Form(...),
    ):
        registry: SessionRegistry = request.app.state.sessions
        previous = request.session.get(SESSION_KEY)
        token, vault_session = registry.get_or_create(previous)
        try:
            vault_session.login(username, vault_id)
        except VaultError as e:
            if token != previous:
                # A fresh token never reached the cookie
                registry.discard(token)
            raise to_http_error(e) from e

        request.session[SESSION_KEY] = token
        return session_state(vault_session)

    @router.post("/logout")
    async def logout(request: Request):
        registry: SessionRegistry = request.app.state.sessions
        token = request.session.get(SESSION_KEY)
        vault_session = registry.get(token)
        if vault_session is not None:
            vault_session.logout()
        registry.discard(token)
        request.session.clear()
        return {"logged_in": False}

    @router.get("/api/session")
    async def get_session_state(request: Request):
        if not is_authenticated(request):
            return {"logged_in": False}
        registry: SessionRegistry = request.app.state.sessions
        return session_state(registry.get(request.session.get(SESSION_KEY)))

    @router.get("/api/vault")
    async def get_vault(vault_session: VaultSession = Depends(verify_session)):  # noqa: B008
        return dump_vault(vault_session.vault)

    @router.post("/api/vault/refresh")
    async def refresh_vault(vault_session: VaultSession = Depends(verify_session)):  # noqa: B008
        try:
            return dump_vault(vault_session.refresh())
        except VaultError as e:
            raise to_http_error(e) from e

    @router.post("/api/vault/save")
    async def save_vault(vault_session: VaultSession = Depends(verify_session)):  # noqa: B008
        try:
            vault_session.save()
        except VaultError as e:
            raise to_http_error(e) from e
        return {"save_status": vault_session.save_status.value}

    @router.post("/api/folders", status_code=status.HTTP_201_CREATED)
    async def create_folder(
        body: FolderCreate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            folder = vault_session.create_folder(body.name)
        except VaultError as e:
            raise to_http_error(e) from e
        return folder.model_dump(mode="json", by_alias=True)

    @router.delete("/api/folders/{folder_id}")
    async def delete_folder(
        folder_id: str,
        cascade: bool = False,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            if cascade:
                vault_session.delete_folder_cascade(folder_id)
            else:
                vault_session.delete_folder_keep_notes(folder_id)
        except VaultError as e:
            raise to_http_error(e) from e
        return dump_vault(vault_session.vault)

    @router.post("/api/folders/{folder_id}/toggle")
    async def toggle_folder(
        folder_id: str,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        if vault_session.vault.get_folder(folder_id) is None:
            raise HTTPException(status_code=404, detail=f"Folder {folder_id} not found")
        return {"folder_id": folder_id, "expanded": vault_session.toggle_folder(folder_id)}

    @router.post("/api/notes", status_code=status.HTTP_201_CREATED)
    async def create_note(
        body: NoteCreate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            note = vault_session.create_note(body.title, body.folder_id)
        except VaultError as e:
            raise to_http_error(e) from e
        return note.model_dump(mode="json", by_alias=True)

    @router.put("/api/notes/{note_id}/content")
    async def update_note_content(
        note_id: str,
        body: ContentUpdate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            note = vault_session.update_note(note_id, body.content)
        except VaultError as e:
            raise to_http_error(e) from e
        return note.model_dump(mode="json", by_alias=True)

    @router.delete("/api/notes/{note_id}")
    async def delete_note(
        note_id: str,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            vault_session.delete_note(note_id)
        except VaultError as e:
            raise to_http_error(e) from e
        return dump_vault(vault_session.vault)

    @router.post("/api/notes/{note_id}/select")
    async def select_note(
        note_id: str,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            note = vault_session.select_note(note_id)
        except VaultError as e:
            raise to_http_error(e) from e
        return note.model_dump(mode="json", by_alias=True)

    @router.get("/api/selection")
    async def get_selection(vault_session: VaultSession = Depends(verify_session)):  # noqa: B008
        note = vault_session.selected_note
        return {"note": note.model_dump(mode="json", by_alias=True) if note else None}

    @router.post("/api/notes/{note_id}/comments", status_code=status.HTTP_201_CREATED)
    async def add_comment(
        note_id: str,
        body: CommentCreate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            vault_session.select_note(note_id)
            comment = vault_session.add_comment(body.text)
        except VaultError as e:
            raise to_http_error(e) from e
        return comment.model_dump(mode="json", by_alias=True)

    @router.post("/api/notes/{note_id}/images", status_code=status.HTTP_201_CREATED)
    async def add_image(
        note_id: str,
        body: ImageCreate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            vault_session.select_note(note_id)
            image = vault_session.add_image(body.url)
        except VaultError as e:
            raise to_http_error(e) from e
        return image.model_dump(mode="json", by_alias=True)

    @router.post("/api/notes/{note_id}/links", status_code=status.HTTP_201_CREATED)
    async def add_link(
        note_id: str,
        body: LinkCreate,
        vault_session: VaultSession = Depends(verify_session),  # noqa: B008
    ):
        try:
            vault_session.select_note(note_id)
            link = vault_session.add_link(body.url, body.title)
        except VaultError as e:
            raise to_http_error(e) from e
        return link.model_dump(mode="json", by_alias=True)

    return router
