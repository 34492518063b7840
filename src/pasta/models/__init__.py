"""Pydantic models for pasta output files."""

from pasta.models.base import JSONValue, PastaBaseModel
from pasta.models.learn import LearnMeta, ModelFile, RoundRecord

__all__ = ["JSONValue", "LearnMeta", "ModelFile", "PastaBaseModel", "RoundRecord"]
