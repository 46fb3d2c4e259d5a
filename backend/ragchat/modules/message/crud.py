"""CRUD operations for message entities using FastCRUD."""

from fastcrud import FastCRUD

from .models import Message

message_crud: FastCRUD = FastCRUD(Message)
