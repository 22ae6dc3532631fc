"""Configuration schema definitions for the module registry and migration descriptors."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModuleConfig(BaseModel):
    """A single extension module known to the sync engine."""

    name: str = Field(..., description="Module identifier")
    path: str = Field(..., description="Base directory of the module on disk")
    description: Optional[str] = Field(None, description="Optional description")
    enabled: bool = Field(default=True, description="Whether the module is loaded")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid module name: {v!r}")
        return v


class SyncConfig(BaseModel):
    """Root configuration: where resources go and which modules provide them."""

    project_location: Optional[str] = Field(None, description="Override for the project location")
    modules_dir: Optional[str] = Field(None, description="Directory scanned for modules")
    modules: List[ModuleConfig] = Field(default_factory=list, description="Explicit module registry")

    @field_validator('modules')
    @classmethod
    def validate_unique_modules(cls, v):
        names = [module.name for module in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate module names: {duplicates}")
        return v

    def get_enabled_modules(self) -> List[ModuleConfig]:
        """Get all enabled modules."""
        return [module for module in self.modules if module.enabled]


class MigrationInstruction(BaseModel):
    """One entry of a module's migrations.json descriptor."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    files_to_delete: List[str] = Field(
        ...,
        alias="filesToDelete",
        description="Store paths to delete, relative to the store root"
    )
