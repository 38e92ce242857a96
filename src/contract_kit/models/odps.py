"""ODPS (Open Data Product Standard) models.

A data product groups data contracts behind input and output ports. Ports
refer to contracts by ``contractId``; the product itself has no table
schema.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from contract_kit.models.base import CamelModel
from contract_kit.models.tag import TagList


class ODPSStatus(str, Enum):
    """ODPS data product status."""

    PROPOSED = "proposed"
    DRAFT = "draft"
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    RETIRED = "retired"


class ODPSCustomProperty(CamelModel):
    property: str = Field(..., description="Property name")
    value: Any = Field(default=None, description="Property value")
    description: str | None = Field(default=None, description="Property description")


class ODPSDescription(CamelModel):
    purpose: str | None = Field(default=None, description="What the product is for")
    limitations: str | None = Field(default=None, description="Known limitations")
    usage: str | None = Field(default=None, description="How to use it")


class ODPSInputPort(CamelModel):
    name: str = Field(..., description="Port name")
    version: str = Field(..., description="Port version")
    contract_id: str = Field(..., description="Consumed contract id")
    tags: TagList = Field(default_factory=list, description="Port tags")
    custom_properties: list[ODPSCustomProperty] | None = Field(default=None, description="Extra properties")


class ODPSInputContract(CamelModel):
    id: str = Field(..., description="Contract id")
    version: str = Field(..., description="Contract version")


class ODPSOutputPort(CamelModel):
    name: str = Field(..., description="Port name")
    description: str | None = Field(default=None, description="Port description")
    version: str = Field(..., description="Port version")
    contract_id: str | None = Field(default=None, description="Published contract id")
    input_contracts: list[ODPSInputContract] | None = Field(default=None, description="Contracts this port derives from")
    tags: TagList = Field(default_factory=list, description="Port tags")
    custom_properties: list[ODPSCustomProperty] | None = Field(default=None, description="Extra properties")


class ODPSTeamMember(CamelModel):
    username: str = Field(..., description="Member username")
    name: str | None = Field(default=None, description="Display name")
    role: str | None = Field(default=None, description="Role on the team")


class ODPSTeam(CamelModel):
    name: str | None = Field(default=None, description="Team name")
    members: list[ODPSTeamMember] | None = Field(default=None, description="Team members")


class ODPSDataProduct(CamelModel):
    """An ODPS data product."""

    api_version: str = Field(default="v1.0.0", description="ODPS version")
    kind: str = Field(default="DataProduct", description="Document kind")
    id: str = Field(..., description="Product identifier")
    name: str | None = Field(default=None, description="Product name")
    version: str | None = Field(default=None, description="Product version")
    status: ODPSStatus = Field(default=ODPSStatus.DRAFT, description="Lifecycle status")
    domain: str | None = Field(default=None, description="Business domain")
    tenant: str | None = Field(default=None, description="Owning tenant")
    description: ODPSDescription | None = Field(default=None, description="Product description")
    tags: TagList = Field(default_factory=list, description="Product tags")
    input_ports: list[ODPSInputPort] | None = Field(default=None, description="Consumed contracts")
    output_ports: list[ODPSOutputPort] | None = Field(default=None, description="Published contracts")
    team: ODPSTeam | None = Field(default=None, description="Owning team")
    custom_properties: list[ODPSCustomProperty] | None = Field(default=None, description="Extra properties")

    def referenced_contract_ids(self) -> list[str]:
        """Contract ids named by input and output ports, first occurrence order."""
        ids: list[str] = []
        for port in self.input_ports or []:
            if port.contract_id not in ids:
                ids.append(port.contract_id)
        for port in self.output_ports or []:
            if port.contract_id and port.contract_id not in ids:
                ids.append(port.contract_id)
        return ids
