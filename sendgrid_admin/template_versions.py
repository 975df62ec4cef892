"""Template version manager for the SendGrid SDK."""

from __future__ import annotations

from sendgrid_admin._base import BaseManager
from sendgrid_admin.errors import classify_response
from sendgrid_admin.types import TemplateVersion, template_version_payload


class TemplateVersionManager(BaseManager):
    """Template version API.

    Versions live under a parent template, so every call needs the
    template ID. Responses without a version ID are rejected as
    undecodable.
    """

    resource = "template_versions"

    @staticmethod
    def _path(template_id: str, version_id: str | None = None) -> str:
        path = f"/templates/{template_id}/versions"
        if version_id:
            path = f"{path}/{version_id}"
        return path

    async def create(self, version: TemplateVersion) -> TemplateVersion:
        """Create a new version under ``version.template_id``.

        Template ID, name and subject are checked in that order.
        Statuses below 500 are passed to the decoder; 5xx is an error.

        Args:
            version: Version to create; read-only fields are ignored

        Returns:
            Created TemplateVersion
        """
        self._require(version.template_id, "template_id")
        self._require(version.name, "name")
        self._require(version.subject, "subject")

        response = await self._transport.request(
            "POST",
            self._path(version.template_id),
            json=template_version_payload(version),
        )
        if response.status_code >= 500:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed creating template version",
            )

        created = self._parse(response.body)
        self._log.debug(
            "template_version.created",
            template_id=version.template_id,
            version_id=created.id,
        )
        return created

    async def get(self, template_id: str, version_id: str) -> TemplateVersion:
        """Get one version of a template."""
        self._require(template_id, "template_id")
        self._require(version_id, "version_id")

        response = await self._transport.request("GET", self._path(template_id, version_id))
        return self._parse(response.body)

    async def update(self, version: TemplateVersion) -> TemplateVersion:
        """Update a version in place. All content fields are mutable.

        Args:
            version: Version with ``id`` and ``template_id`` set

        Returns:
            Updated TemplateVersion
        """
        self._require(version.id, "version_id")
        self._require(version.template_id, "template_id")

        response = await self._transport.request(
            "PATCH",
            self._path(version.template_id, version.id),
            json=template_version_payload(version),
        )
        return self._parse(response.body)

    async def delete(self, template_id: str, version_id: str) -> None:
        """Delete a version. 204 and 404 both count as deleted.

        Raises:
            RemoteError: On any other status; the body is not included
        """
        self._require(template_id, "template_id")
        self._require(version_id, "version_id")

        response = await self._transport.request(
            "DELETE",
            self._path(template_id, version_id),
        )
        if response.status_code not in (204, 404):
            raise classify_response(
                response.status_code,
                "",
                message="failed deleting template version",
            )
        self._log.debug(
            "template_version.deleted",
            template_id=template_id,
            version_id=version_id,
        )

    def _parse(self, body: str) -> TemplateVersion:
        return self._decode_with_id(TemplateVersion, body, what="template version")
