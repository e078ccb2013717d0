"""Credential records injected into this trusted extension by the CI server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CredentialRecord(_Record):
    """Generic credential with free-form additional properties."""

    name: str = ""
    type: str = ""
    additional_properties: dict[str, Any] = Field(
        default_factory=dict, alias="additionalProperties"
    )


class NugetServerProperties(_Record):
    api_url: str = Field(default="", alias="apiUrl")
    api_key: str = Field(default="", alias="apiKey")


class NugetServerCredential(_Record):
    """Credentials for a NuGet server (API URL and API key)."""

    name: str = ""
    type: str = ""
    additional_properties: NugetServerProperties = Field(
        default_factory=NugetServerProperties, alias="additionalProperties"
    )

    @property
    def api_url(self) -> str:
        return self.additional_properties.api_url

    @property
    def api_key(self) -> str:
        return self.additional_properties.api_key


class SonarQubeServerProperties(_Record):
    api_url: str = Field(default="", alias="apiUrl")


class SonarQubeServerCredential(_Record):
    """Credentials for a SonarQube server (API URL only)."""

    name: str = ""
    type: str = ""
    additional_properties: SonarQubeServerProperties = Field(
        default_factory=SonarQubeServerProperties, alias="additionalProperties"
    )

    @property
    def api_url(self) -> str:
        return self.additional_properties.api_url
