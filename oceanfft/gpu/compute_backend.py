# -*- coding: utf-8 -*-

"""
Filename: compute_backend.py
Author: storro
Date: 2026-02-11
Description: Capability surface the ocean stages need from a GPU compute backend
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from oceanfft.gpu.parameter_blocks import ParameterBlock
from oceanfft.util.errors import BackendCapabilityError, PipelineStateError


class TextureFormat(Enum):
    R32F = ("r32f", 1, "<f4")
    RGBA32F = ("rgba32f", 4, "<f4")
    RGBA16F = ("rgba16f", 4, "<f2")

    def __init__(self, label: str, channels: int, dtype: str) -> None:
        self.label = label
        self.channels = channels
        self.dtype = dtype

    @property
    def bytes_per_texel(self) -> int:
        return self.channels * int(self.dtype[-1])


class Access(Enum):
    READ = "read"
    WRITE = "write"
    READ_WRITE = "read_write"
    SAMPLED = "sampled"
    BUFFER = "buffer"

    @property
    def reads(self) -> bool:
        return self is not Access.WRITE

    @property
    def writes(self) -> bool:
        return self in (Access.WRITE, Access.READ_WRITE)


@dataclass(eq=False)
class TextureHandle:
    name: str
    width: int
    height: int
    format: TextureFormat
    storage: bool
    native: Any = field(default=None, repr=False)


@dataclass(eq=False)
class BufferHandle:
    name: str
    size: int
    native: Any = field(default=None, repr=False)


@dataclass(eq=False)
class KernelHandle:
    name: str
    native: Any = field(default=None, repr=False)


@dataclass(frozen=True)
class Binding:
    """One named resource slot of a kernel invocation."""

    name: str
    resource: TextureHandle | BufferHandle
    access: Access


@dataclass(eq=False)
class ResourceSet:
    kernel: KernelHandle
    bindings: tuple[Binding, ...]
    native: Any = field(default=None, repr=False)


Resource = TextureHandle | BufferHandle | KernelHandle | ResourceSet


class BindCommand(NamedTuple):
    resource_set: ResourceSet


class PushCommand(NamedTuple):
    params: ParameterBlock


class DispatchCommand(NamedTuple):
    groups_x: int
    groups_y: int


class BarrierCommand(NamedTuple):
    pass


class ComputeList:
    """Ordered record of compute commands, executed by ComputeBackend.submit()."""

    def __init__(self, label: str = "compute_list") -> None:
        self.label = label
        self.commands: list[BindCommand | PushCommand | DispatchCommand | BarrierCommand] = []
        self._closed = False
        self._bound: ResourceSet | None = None
        self._params: ParameterBlock | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise PipelineStateError(f"compute list '{self.label}' is already closed")

    def bind(self, resource_set: ResourceSet) -> None:
        self._check_open()
        self._bound = resource_set
        self._params = None
        self.commands.append(BindCommand(resource_set))

    def push(self, params: ParameterBlock) -> None:
        self._check_open()
        if self._bound is None:
            raise PipelineStateError("push() before bind()")
        self._params = params
        self.commands.append(PushCommand(params))

    def dispatch(self, groups_x: int, groups_y: int) -> None:
        self._check_open()
        if self._bound is None or self._params is None:
            raise PipelineStateError("dispatch() needs a bound resource set and pushed parameters")
        if groups_x < 1 or groups_y < 1:
            raise ValueError(f"invalid dispatch size {groups_x}x{groups_y}")
        self.commands.append(DispatchCommand(int(groups_x), int(groups_y)))

    def barrier(self) -> None:
        self._check_open()
        self.commands.append(BarrierCommand())

    def end(self) -> "ComputeList":
        self._check_open()
        self._closed = True
        return self

    def dispatches(self) -> list[tuple[ResourceSet, ParameterBlock, DispatchCommand]]:
        """Flatten the record into (resource set, parameters, dispatch) triples."""
        result = []
        bound = None
        params = None
        for cmd in self.commands:
            if isinstance(cmd, BindCommand):
                bound, params = cmd.resource_set, None
            elif isinstance(cmd, PushCommand):
                params = cmd.params
            elif isinstance(cmd, DispatchCommand):
                result.append((bound, params, cmd))
        return result


class ComputeBackend(ABC):
    """
    Everything the ocean stages consume from the GPU: kernels, 2D textures,
    storage buffers, named resource sets and ordered compute lists.
    """

    @abstractmethod
    def supports_format(self, fmt: TextureFormat, storage: bool) -> bool:
        ...

    @abstractmethod
    def load_kernel(self, name: str) -> KernelHandle:
        ...

    @abstractmethod
    def _create_texture(self,
                        name: str,
                        width: int,
                        height: int,
                        fmt: TextureFormat,
                        storage: bool,
                        data: bytes | None) -> TextureHandle:
        ...

    @abstractmethod
    def create_storage_buffer(self, name: str, data: bytes) -> BufferHandle:
        ...

    @abstractmethod
    def _create_resource_set(self, kernel: KernelHandle, bindings: tuple[Binding, ...]) -> ResourceSet:
        ...

    @abstractmethod
    def submit(self, compute_list: ComputeList, wait: bool = False) -> None:
        ...

    @abstractmethod
    def sync(self) -> None:
        ...

    @abstractmethod
    def read_texture(self, texture: TextureHandle) -> bytes:
        ...

    @abstractmethod
    def free(self, resource: Resource) -> None:
        ...

    def create_texture(self,
                       name: str,
                       width: int,
                       height: int,
                       fmt: TextureFormat,
                       storage: bool = True,
                       data: bytes | None = None) -> TextureHandle:
        if width < 1 or height < 1:
            raise BackendCapabilityError(f"invalid texture size {width}x{height}", resource=name)
        if not self.supports_format(fmt, storage):
            usage = "storage" if storage else "sampled"
            raise BackendCapabilityError(f"{fmt.label} texture unsupported for {usage} usage", resource=name)
        if data is not None and len(data) != width * height * fmt.bytes_per_texel:
            raise BackendCapabilityError(
                f"initial data is {len(data)} bytes, expected {width * height * fmt.bytes_per_texel}",
                resource=name,
            )
        return self._create_texture(name, width, height, fmt, storage, data)

    def create_resource_set(self, kernel: KernelHandle, bindings) -> ResourceSet:
        bindings = tuple(bindings)
        seen = set()
        for b in bindings:
            if b.name in seen:
                raise BackendCapabilityError(f"binding '{b.name}' given twice", resource=kernel.name)
            seen.add(b.name)
            if isinstance(b.resource, TextureHandle):
                if b.access is Access.BUFFER:
                    raise BackendCapabilityError(f"texture bound as buffer at '{b.name}'", resource=b.resource.name)
                if b.access is not Access.SAMPLED and not b.resource.storage:
                    raise BackendCapabilityError(
                        f"texture without storage usage bound as image at '{b.name}'", resource=b.resource.name
                    )
            elif b.access is not Access.BUFFER:
                raise BackendCapabilityError(f"buffer bound as image at '{b.name}'", resource=b.resource.name)
        return self._create_resource_set(kernel, bindings)

    def begin(self, label: str = "compute_list") -> ComputeList:
        return ComputeList(label)

    def destroy(self) -> None:
        """Tear down the backend itself, after every resource has been freed."""


class ResourceTracker:
    """
    Remembers every resource allocated through it, in order, so that a
    pipeline can free all of them (newest first) on release or on a
    failed initialization.
    """

    def __init__(self, backend: ComputeBackend) -> None:
        self.backend = backend
        self._resources: list[Resource] = []

    def __len__(self) -> int:
        return len(self._resources)

    def track(self, resource):
        self._resources.append(resource)
        return resource

    def texture(self, name: str, width: int, height: int, fmt: TextureFormat,
                storage: bool = True, data: bytes | None = None) -> TextureHandle:
        return self.track(self.backend.create_texture(name, width, height, fmt, storage, data))

    def storage_buffer(self, name: str, data: bytes) -> BufferHandle:
        return self.track(self.backend.create_storage_buffer(name, data))

    def kernel(self, name: str) -> KernelHandle:
        return self.track(self.backend.load_kernel(name))

    def resource_set(self, kernel: KernelHandle, bindings) -> ResourceSet:
        return self.track(self.backend.create_resource_set(kernel, bindings))

    def release(self) -> None:
        while self._resources:
            self.backend.free(self._resources.pop())
