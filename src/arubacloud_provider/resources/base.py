"""Resource Adapter Contract and the generic REST adapter behind every resource type."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from string import Formatter
from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from arubacloud_provider.api.formatting import error_from_response
from arubacloud_provider.core.classifier import Verdict, error_message
from arubacloud_provider.core.context import ReconcileContext
from arubacloud_provider.errors import ApiError, InvalidResponseError
from arubacloud_provider.observability.logging import reconcile_scope
from arubacloud_provider.observability.metrics import MetricsRecorder
from arubacloud_provider.observability.observable import ObservableMixin
from arubacloud_provider.observability.tracing import start_span

if TYPE_CHECKING:
    from arubacloud_provider.api.envelope import ApiResponse
    from arubacloud_provider.provider import ProviderClient

logger = logging.getLogger(__name__)

PROVIDER_PREFIX = "arubacloud"


class ResourceModel(BaseModel):
    """Configuration and state shape of one resource type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str | None = Field(default=None, description="Identifier issued by the API")


class RegionalModel(ResourceModel):
    """Fields shared by resources living in a project and a region."""

    project_id: str = Field(..., min_length=1, description="Owning project")
    name: str = Field(..., min_length=1)
    location: str | None = Field(default=None, description='Region, e.g. "ITBG-Bergamo"')
    tags: list[str] | None = None


class ApiModel(BaseModel):
    """Nested property block exchanged with the API using camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


ModelT = TypeVar("ModelT", bound=ResourceModel)
NestedT = TypeVar("NestedT", bound=ApiModel)


class ResourceAdapter(Protocol[ModelT]):
    """Lifecycle surface the host runtime drives for one resource type."""

    type_name: ClassVar[str]

    async def create(self, ctx: ReconcileContext, config: ModelT) -> ModelT: ...

    async def read(self, ctx: ReconcileContext, state: ModelT) -> ModelT | None: ...

    async def update(self, ctx: ReconcileContext, config: ModelT, prior: ModelT) -> ModelT: ...

    async def delete(self, ctx: ReconcileContext, state: ModelT) -> Verdict: ...

    async def import_state(self, ctx: ReconcileContext, import_id: str) -> ModelT: ...


def mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` as a dict, or an empty dict when it is not a mapping."""
    return dict(value) if isinstance(value, Mapping) else {}


def nested(model: type[NestedT], value: Any) -> NestedT | None:
    """Parse an API object into ``model``; ``None`` when absent."""
    if not isinstance(value, Mapping):
        return None
    return model.model_validate(value)


def reference_uri(value: str | None, project_id: str | None, collection: str) -> str | None:
    """Expand a bare identifier into a full resource URI.

    ``collection`` is the provider path below the project, for instance
    ``"Aruba.Network/vpcs"``. Values already starting with ``/`` are URIs.
    """
    if not value:
        return None
    if value.startswith("/"):
        return value
    return f"/projects/{project_id}/providers/{collection}/{value}"


def reference_state(configured: str | None, remote_uri: Any) -> str | None:
    """Map a remote reference back to the configured form.

    A configured id or URI that designates the remote resource is kept as
    written; otherwise the last URI segment (the id) is stored.
    """
    if not isinstance(remote_uri, str) or not remote_uri:
        return configured
    if configured and (configured == remote_uri or remote_uri.endswith(f"/{configured}")):
        return configured
    return remote_uri.rstrip("/").rsplit("/", 1)[-1]


def reference_of(value: Any) -> Any:
    """Extract ``uri`` from ``{"uri": ...}`` reference objects."""
    if isinstance(value, Mapping):
        return value.get("uri")
    return value


def reference_field(known: BaseModel | None, field_name: str, remote: Any) -> str:
    """Reference stored in ``known.<field_name>`` refreshed from a remote reference."""
    configured = getattr(known, field_name, None) if known is not None else None
    return reference_state(configured, reference_of(remote)) or ""


class RestResource(ObservableMixin, Generic[ModelT]):
    """Generic create/read/update/delete/import over a REST collection.

    Subclasses declare the collection path template, whose placeholders are
    model fields (``/projects/{project_id}/providers/Aruba.Network/vpcs``),
    and supply the request properties and the flattening of responses.
    """

    type_name: ClassVar[str]
    label: ClassVar[str]
    model: ClassVar[type[ResourceModel]]
    collection_path: ClassVar[str]
    updatable: ClassVar[bool] = True
    update_method: ClassVar[str] = "PUT"
    wait_for_ready: ClassVar[bool] = True
    replace_on_change: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, client: ProviderClient, *, metrics: MetricsRecorder | None = None) -> None:
        self._client = client
        self._metrics = metrics
        self._metrics_resource = self.type_name

    @classmethod
    def full_type_name(cls) -> str:
        return f"{PROVIDER_PREFIX}_{cls.type_name}"

    @classmethod
    def path_keys(cls) -> tuple[str, ...]:
        """Model fields filling the placeholders of ``collection_path``, in order."""
        return tuple(name for _, name, _, _ in Formatter().parse(cls.collection_path) if name)

    def collection_url(self, model: ResourceModel) -> str:
        values: dict[str, str] = {}
        for key in self.path_keys():
            value = getattr(model, key, None)
            if not value:
                raise ValueError(f"{self.label} requires {key}")
            values[key] = value
        return self.collection_path.format(**values)

    def item_url(self, model: ResourceModel) -> str:
        if not model.id:
            raise ValueError(f"{self.label} has no id")
        return f"{self.collection_url(model)}/{model.id}"

    # Adapter hooks

    def build_request(self, config: ModelT, current: Mapping[str, Any] | None) -> dict[str, Any]:
        """Build the POST/PUT body; ``current`` is the remote object on update."""
        body: dict[str, Any] = {"metadata": self.build_metadata(config, current)}
        properties = self.build_properties(config, current)
        if properties is not None:
            body["properties"] = properties
        return body

    def build_metadata(
        self, config: ModelT, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        current_metadata = mapping((current or {}).get("metadata"))
        fields = type(config).model_fields
        metadata: dict[str, Any] = {}
        if "name" in fields:
            metadata["name"] = getattr(config, "name")
        if "tags" in fields:
            tags = getattr(config, "tags")
            if tags is None:
                tags = current_metadata.get("tags")
            if tags is not None:
                metadata["tags"] = list(tags)
        if "location" in fields:
            location = getattr(config, "location") or mapping(
                current_metadata.get("location")
            ).get("value")
            if location:
                metadata["location"] = {"value": location}
        return metadata

    def build_properties(
        self, config: ModelT, current: Mapping[str, Any] | None
    ) -> dict[str, Any] | None:
        del config, current
        return {}

    def flatten(self, data: Mapping[str, Any], prior: ModelT | None) -> dict[str, Any]:
        """Map resource-specific parts of a remote object to model fields."""
        del data, prior
        return {}

    def state_fields(self, data: Mapping[str, Any], prior: ModelT | None) -> dict[str, Any]:
        metadata = mapping(data.get("metadata"))
        fields = self.model.model_fields
        updates: dict[str, Any] = {}
        resource_id = self.response_id(data)
        if resource_id:
            updates["id"] = resource_id
        if "uri" in fields and metadata.get("uri"):
            updates["uri"] = metadata["uri"]
        if "name" in fields and metadata.get("name"):
            updates["name"] = metadata["name"]
        if "location" in fields:
            location = mapping(metadata.get("location")).get("value")
            if location:
                updates["location"] = location
        if "tags" in fields and isinstance(metadata.get("tags"), list):
            updates["tags"] = [str(tag) for tag in metadata["tags"]]
        updates.update(self.flatten(data, prior))
        return updates

    def apply_response(self, base: ModelT, data: Mapping[str, Any]) -> ModelT:
        """Return ``base`` refreshed with the fields of a remote object."""
        payload = {**base.model_dump(), **self.state_fields(data, base)}
        return self.model.model_validate(payload)  # type: ignore[return-value]

    def response_id(self, data: Mapping[str, Any]) -> str | None:
        """Identifier of a remote object, used in the item path."""
        resource_id = mapping(data.get("metadata")).get("id")
        return str(resource_id) if resource_id else None

    @staticmethod
    def remote_state(data: Mapping[str, Any]) -> str:
        state = mapping(data.get("status")).get("state")
        return str(state) if state else "Unknown"

    # Lifecycle

    async def create(self, ctx: ReconcileContext, config: ModelT) -> ModelT:
        """POST the resource, wait until it is ready and re-read it.

        Raises:
            ApiError: If the API rejects the request.
            InvalidResponseError: If the response carries no identifier.
        """
        with self._lifecycle("create", None):
            response = await self._client.api.post(
                self.collection_url(config), json=self.build_request(config, None)
            )
            if response.is_error():
                raise error_from_response(
                    response, f"Failed to create {self.label}", log_context=self._log_context()
                )

            data = response.data_dict
            if not self.response_id(data):
                raise InvalidResponseError(
                    f"{self.label} created but no data returned from API"
                )
            state = self.apply_response(config, data)

            with reconcile_scope(resource_id=state.id):
                logger.info("Created %s %s", self.label, state.id)
                if self.wait_for_ready:
                    await self._wait_ready(ctx, state)
                return await self._refresh(state)

    async def read(self, ctx: ReconcileContext, state: ModelT) -> ModelT | None:
        """Return the refreshed state, or ``None`` when the resource is gone."""
        del ctx
        with self._lifecycle("read", state.id):
            response = await self._client.api.get(self.item_url(state))
            if response.status_code == 404:
                logger.info("%s %s not found, removing from state", self.label, state.id)
                return None
            if response.is_error():
                raise error_from_response(
                    response, f"Failed to read {self.label}", log_context=self._log_context()
                )
            return self.apply_response(state, response.data_dict)

    async def update(self, ctx: ReconcileContext, config: ModelT, prior: ModelT) -> ModelT:
        """Apply ``config`` to the existing resource ``prior`` in place.

        The current remote object is fetched first so fields the
        configuration does not manage are sent back unchanged.

        Raises:
            ApiError: If the change requires replacement or the API rejects it.
        """
        with self._lifecycle("update", prior.id):
            if not self.updatable:
                raise ApiError(
                    f"{self.label} {prior.id} cannot be updated in place; "
                    "changes to this resource require replacement"
                )
            changed = sorted(
                name
                for name in self.replace_on_change.union(self.path_keys())
                if getattr(config, name, None) != getattr(prior, name, None)
            )
            if changed:
                raise ApiError(
                    f"Changing {', '.join(changed)} of {self.label} {prior.id} "
                    "requires replacement"
                )

            target = config.model_copy(update={"id": prior.id})
            path = self.item_url(target)
            current = await self._client.api.get(path)
            if current.is_error():
                raise error_from_response(
                    current,
                    f"Failed to get current {self.label} state",
                    log_context=self._log_context(),
                )

            response = await self._client.api.request(
                self.update_method,
                path,
                json=self.build_request(target, current.data_dict),
            )
            if response.is_error():
                raise error_from_response(
                    response, f"Failed to update {self.label}", log_context=self._log_context()
                )

            state = target
            if mapping(response.data_dict.get("metadata")):
                state = self.apply_response(target, response.data_dict)
            if self.wait_for_ready:
                await self._wait_ready(ctx, state)
            return await self._refresh(state)

    async def delete(self, ctx: ReconcileContext, state: ModelT) -> Verdict:
        """Delete through the Retrying Deleter; a 404 counts as deleted."""
        with self._lifecycle("delete", state.id):
            path = self.item_url(state)
            return await self._client.deleter.delete(
                ctx,
                lambda: self._client.api.delete(path),
                self.label,
                state.id or "",
                self._client.resource_timeout_seconds,
            )

    async def import_state(self, ctx: ReconcileContext, import_id: str) -> ModelT:
        """Build state from ``parent/.../id`` without waiting for readiness.

        Raises:
            ValueError: If ``import_id`` does not match the path template.
            ResourceNotFoundError: If the resource does not exist.
        """
        del ctx
        keys = self.path_keys()
        parts = import_id.split("/")
        if len(parts) != len(keys) + 1 or not all(parts):
            expected = "/".join([*keys, "id"])
            raise ValueError(
                f"Invalid import identifier {import_id!r} for {self.full_type_name()}, "
                f"expected {expected}"
            )

        ids: dict[str, Any] = dict(zip(keys, parts[:-1], strict=True))
        resource_id = parts[-1]
        with self._lifecycle("import", resource_id):
            path = f"{self.collection_path.format(**ids)}/{resource_id}"
            response = await self._client.api.get(path)
            if response.is_error():
                raise error_from_response(
                    response, f"Failed to import {self.label}", log_context=self._log_context()
                )
            return self._from_remote({**ids, "id": resource_id}, response.data_dict)

    async def lookup(self, ctx: ReconcileContext, config: ModelT) -> ModelT:
        """Read an existing resource by id for a data source.

        Raises:
            ResourceNotFoundError: If the identifier returns 404.
        """
        del ctx
        with self._lifecycle("lookup", config.id):
            response = await self._client.api.get(self.item_url(config))
            if response.is_error():
                raise error_from_response(
                    response, f"Failed to read {self.label}", log_context=self._log_context()
                )
            return self.apply_response(config, response.data_dict)

    # Internals

    def _from_remote(self, ids: Mapping[str, Any], data: Mapping[str, Any]) -> ModelT:
        try:
            return self.model.model_validate(  # type: ignore[return-value]
                {**ids, **self.state_fields(data, None)}
            )
        except ValidationError as exc:
            raise InvalidResponseError(
                f"{self.label} {ids.get('id')} returned incomplete data: {exc}"
            ) from exc

    async def _wait_ready(self, ctx: ReconcileContext, state: ModelT) -> str:
        path = self.item_url(state)

        async def check() -> str:
            response = await self._client.api.get(path)
            if response.is_error():
                raise ApiError(
                    error_message(*_title_detail(response))
                    or f"API error (status: {response.status_code})",
                    status_code=response.status_code,
                    error=response.error,
                )
            return self.remote_state(response.data_dict)

        return await self._client.poller.wait_until_ready(
            ctx,
            check,
            self.label,
            state.id or "",
            self._client.resource_timeout_seconds,
        )

    async def _refresh(self, state: ModelT) -> ModelT:
        response = await self._client.api.get(self.item_url(state))
        if response.is_error():
            logger.warning(
                "Could not re-read %s %s (status: %s), keeping known state",
                self.label,
                state.id,
                response.status_code,
            )
            return state
        return self.apply_response(state, response.data_dict)

    def _log_context(self) -> dict[str, Any]:
        return {"resource_type": self.full_type_name()}

    @contextmanager
    def _lifecycle(self, operation: str, resource_id: str | None) -> Iterator[None]:
        started = perf_counter()
        with (
            reconcile_scope(
                resource_type=self.full_type_name(),
                resource_id=resource_id,
                operation=operation,
            ),
            start_span(
                f"arubacloud.{self.type_name}.{operation}",
                attributes={
                    "arubacloud.resource_type": self.full_type_name(),
                    "arubacloud.resource_id": resource_id,
                },
            ),
        ):
            try:
                yield
            except Exception as exc:
                self._observe_error(operation, started, exc)
                raise
        self._observe_operation(operation, started, success=True)


class DataSource(Generic[ModelT]):
    """Read-only view over a resource type, looked up by identifier."""

    def __init__(self, resource: RestResource[ModelT]) -> None:
        self._resource = resource

    @property
    def type_name(self) -> str:
        return self._resource.type_name

    @property
    def model(self) -> type[ResourceModel]:
        return self._resource.model

    async def read(self, ctx: ReconcileContext, config: ModelT) -> ModelT:
        return await self._resource.lookup(ctx, config)


def _title_detail(response: ApiResponse) -> tuple[str | None, str | None]:
    if response.error is None:
        return None, None
    return response.error.title, response.error.detail
