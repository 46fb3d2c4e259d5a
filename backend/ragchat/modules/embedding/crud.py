"""CRUD operations for embedding entities using FastCRUD."""

from fastcrud import FastCRUD

from .models import Embedding

embedding_crud: FastCRUD = FastCRUD(Embedding)
