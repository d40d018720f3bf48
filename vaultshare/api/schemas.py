from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    name: str


class NoteCreate(BaseModel):
    title: str
    folder_id: str | None = Field(None, description="Folder to list the note in, None for root")


class ContentUpdate(BaseModel):
    content: str


class CommentCreate(BaseModel):
    text: str


class ImageCreate(BaseModel):
    url: str


class LinkCreate(BaseModel):
    url: str
    title: str | None = Field(None, description="Display title, defaults to the URL")
