"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, Field


class StartGameBody(BaseModel):
    premise: str = Field(min_length=1)


class ActionBody(BaseModel):
    action: str = Field(min_length=1)


class RelationshipPanelBody(BaseModel):
    open: bool
