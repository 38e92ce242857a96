"""CADS (Compute Asset Description Specification) models.

CADS v1.0 describes compute assets: AI/ML models, applications, pipelines
and source/destination systems. Assets carry tags but no table schema.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from contract_kit.models.base import CamelModel
from contract_kit.models.tag import TagList


class CADSKind(str, Enum):
    """CADS asset kinds."""

    AI_MODEL = "AIModel"
    ML_PIPELINE = "MLPipeline"
    APPLICATION = "Application"
    DATA_PIPELINE = "DataPipeline"
    ETL_PROCESS = "ETLProcess"
    ETL_PIPELINE = "ETLPipeline"
    SOURCE_SYSTEM = "SourceSystem"
    DESTINATION_SYSTEM = "DestinationSystem"


class CADSStatus(str, Enum):
    """CADS asset status."""

    DRAFT = "draft"
    VALIDATED = "validated"
    PRODUCTION = "production"
    DEPRECATED = "deprecated"


class CADSExternalLink(CamelModel):
    url: str = Field(..., description="Link target")
    description: str | None = Field(default=None, description="Link description")


class CADSDescription(CamelModel):
    purpose: str | None = Field(default=None, description="What the asset is for")
    usage: str | None = Field(default=None, description="How to use it")
    limitations: str | None = Field(default=None, description="Known limitations")
    external_links: list[CADSExternalLink] | None = Field(default=None, description="Related links")


class CADSRuntimeContainer(CamelModel):
    image: str | None = Field(default=None, description="Container image")


class CADSRuntimeResources(CamelModel):
    cpu: str | None = Field(default=None, description="CPU request")
    memory: str | None = Field(default=None, description="Memory request")
    gpu: str | None = Field(default=None, description="GPU request")


class CADSRuntime(CamelModel):
    environment: str | None = Field(default=None, description="Runtime environment")
    endpoints: list[str] | None = Field(default=None, description="Service endpoints")
    container: CADSRuntimeContainer | None = Field(default=None, description="Container details")
    resources: CADSRuntimeResources | None = Field(default=None, description="Resource requests")


class CADSTeamMember(CamelModel):
    role: str = Field(..., description="Role on the team")
    name: str = Field(..., description="Member name")
    contact: str | None = Field(default=None, description="Contact address")


class CADSRisk(CamelModel):
    classification: str | None = Field(default=None, description="minimal, low, medium or high")
    impact_areas: list[str] | None = Field(default=None, description="Affected areas")
    intended_use: str | None = Field(default=None, description="Intended use")
    out_of_scope_use: str | None = Field(default=None, description="Out-of-scope use")


class CADSAsset(CamelModel):
    """A CADS compute asset."""

    api_version: str = Field(default="v1.0", description="CADS version")
    kind: CADSKind = Field(..., description="Asset kind")
    id: str = Field(..., description="Asset identifier")
    name: str = Field(..., description="Asset name")
    version: str = Field(default="1.0.0", description="Asset version")
    status: CADSStatus = Field(default=CADSStatus.DRAFT, description="Lifecycle status")
    domain: str | None = Field(default=None, description="Business domain")
    tags: TagList = Field(default_factory=list, description="Asset tags")
    description: CADSDescription | None = Field(default=None, description="Asset description")
    runtime: CADSRuntime | None = Field(default=None, description="Runtime details")
    team: list[CADSTeamMember] | None = Field(default=None, description="Owning team")
    risk: CADSRisk | None = Field(default=None, description="Risk assessment")
    custom_properties: dict[str, Any] | None = Field(default=None, description="Extra properties")
