# -*- coding: utf-8 -*-

"""
Filename: panda3d_backend.py
Author: storro
Date: 2026-02-11
Description: ComputeBackend implementation on top of Panda3D compute shaders
"""

import logging

import numpy as np

from panda3d.core import (
    GeomEnums,
    NodePath,
    SamplerState,
    Shader,
    ShaderAttrib,
    ShaderBuffer,
    Texture,
    load_prc_file_data,
)

from oceanfft.gpu.compute_backend import (
    Access,
    BarrierCommand,
    BindCommand,
    Binding,
    BufferHandle,
    ComputeBackend,
    ComputeList,
    DispatchCommand,
    KernelHandle,
    PushCommand,
    Resource,
    ResourceSet,
    TextureFormat,
    TextureHandle,
)
from oceanfft.util.assets_path import shader_path
from oceanfft.util.errors import BackendCapabilityError, PipelineStateError


# Float dtype of a RAM image by component width in bytes
_RAM_DTYPES = {2: "<f2", 4: "<f4"}

# (component type, texture format) per TextureFormat
_PANDA_FORMATS = {
    TextureFormat.R32F: (Texture.T_float, Texture.F_r32),
    TextureFormat.RGBA32F: (Texture.T_float, Texture.F_rgba32),
    TextureFormat.RGBA16F: (Texture.T_half_float, Texture.F_rgba16),
}


class Panda3DComputeBackend(ComputeBackend):
    """
    Runs compute lists with GraphicsEngine.dispatch_compute().

    Each resource set owns a NodePath carrying the kernel and its bound
    inputs; pushing parameters overwrites that NodePath's uniforms. Panda3D's
    GL backend issues glMemoryBarrier itself when an image written by one
    dispatch is accessed by the next, so recorded barriers only mark the
    ordering point.
    """

    def __init__(self, graphics_engine, gsg, shader_dir: str | None = None) -> None:
        self._engine = graphics_engine
        self._gsg = gsg
        self._shader_dir = shader_dir
        self._showbase = None

        if self._gsg is None:
            raise BackendCapabilityError("no graphics state guardian available")
        if not self._gsg.get_supports_compute_shaders():
            raise BackendCapabilityError("graphics driver does not support compute shaders")

    @classmethod
    def from_showbase(cls, app, shader_dir: str | None = None) -> "Panda3DComputeBackend":
        return cls(app.graphics_engine, app.win.get_gsg(), shader_dir)

    @classmethod
    def offscreen(cls, shader_dir: str | None = None) -> "Panda3DComputeBackend":
        """Open a headless 1x1 GL 4.3 context, for batch runs and tests."""
        # imported here so that importing this module doesn't drag in ShowBase
        from direct.showbase.ShowBase import ShowBase

        prc_data = """
            window-title oceanfft
            win-size 1 1
            gl-version 4 3
            audio-library-name null
            sync-video false
        """
        load_prc_file_data("", prc_data)
        base = ShowBase(windowType="offscreen")
        if base.win is None:
            base.destroy()
            raise BackendCapabilityError("could not open an offscreen graphics buffer")

        backend = cls.from_showbase(base, shader_dir)
        backend._showbase = base
        return backend

    def supports_format(self, fmt: TextureFormat, storage: bool) -> bool:
        if fmt not in _PANDA_FORMATS:
            return False
        if storage:
            # image load/store comes with compute shader support (GL 4.3)
            return bool(self._gsg.get_supports_compute_shaders())
        return True

    def load_kernel(self, name: str) -> KernelHandle:
        if self._shader_dir is None:
            path = shader_path(name)
        else:
            path = f"{self._shader_dir}/{name}.comp.glsl"

        shader = Shader.load_compute(Shader.SL_GLSL, path)
        if shader is None:
            raise BackendCapabilityError(f"failed to load compute shader {path}", resource=name)
        return KernelHandle(name, shader)

    def _create_texture(self,
                        name: str,
                        width: int,
                        height: int,
                        fmt: TextureFormat,
                        storage: bool,
                        data: bytes | None) -> TextureHandle:
        component_type, texture_format = _PANDA_FORMATS[fmt]
        tex = Texture(name)
        tex.setup_2d_texture(width, height, component_type, texture_format)
        tex.set_clear_color((0.0, 0.0, 0.0, 0.0))
        # Exact texel reads only, the kernels never filter
        tex.set_minfilter(SamplerState.FT_nearest)
        tex.set_magfilter(SamplerState.FT_nearest)
        tex.set_wrap_u(SamplerState.WM_clamp)
        tex.set_wrap_v(SamplerState.WM_clamp)
        if data is not None:
            if fmt.channels == 4:
                tex.set_ram_image_as(data, "RGBA")
            else:
                tex.set_ram_image(data)
        return TextureHandle(name, width, height, fmt, storage, tex)

    def create_storage_buffer(self, name: str, data: bytes) -> BufferHandle:
        buf = ShaderBuffer(name, data, GeomEnums.UH_static)
        return BufferHandle(name, len(data), buf)

    def _create_resource_set(self, kernel: KernelHandle, bindings: tuple[Binding, ...]) -> ResourceSet:
        np = NodePath(f"{kernel.name}_set")
        np.set_shader(kernel.native)
        for b in bindings:
            if b.resource.native is None:
                raise BackendCapabilityError(f"resource was already freed (binding '{b.name}')",
                                             resource=b.resource.name)
            if b.access is Access.SAMPLED or b.access is Access.BUFFER:
                np.set_shader_input(b.name, b.resource.native)
            else:
                np.set_shader_input(b.name, b.resource.native, b.access.reads, b.access.writes)
        return ResourceSet(kernel, bindings, np)

    def submit(self, compute_list: ComputeList, wait: bool = False) -> None:
        if not compute_list.closed:
            compute_list.end()

        bound: ResourceSet | None = None
        dispatch_count = 0
        for cmd in compute_list.commands:
            if isinstance(cmd, BindCommand):
                bound = cmd.resource_set
            elif isinstance(cmd, PushCommand):
                for input_name, value in cmd.params.shader_inputs().items():
                    bound.native.set_shader_input(input_name, value)
            elif isinstance(cmd, DispatchCommand):
                sattr = bound.native.get_attrib(ShaderAttrib)
                self._engine.dispatch_compute((cmd.groups_x, cmd.groups_y, 1), sattr, self._gsg)
                dispatch_count += 1
            elif isinstance(cmd, BarrierCommand):
                continue

        logging.debug("Submitted %s: %d dispatches", compute_list.label, dispatch_count)
        if wait:
            self.sync()

    def sync(self) -> None:
        self._engine.sync_frame()

    def read_texture(self, texture: TextureHandle) -> bytes:
        tex = texture.native
        if tex is None:
            raise PipelineStateError(f"texture {texture.name} was already freed")
        if not self._engine.extract_texture_data(tex, self._gsg):
            raise BackendCapabilityError("texture readback failed", resource=texture.name)
        return ram_image_bytes(texture)

    def free(self, resource: Resource) -> None:
        native = resource.native
        if native is None:
            return
        if isinstance(resource, (TextureHandle, BufferHandle)):
            native.release_all()
        elif isinstance(resource, ResourceSet):
            native.clear_shader()
            native.remove_node()
        resource.native = None

    def destroy(self) -> None:
        if self._showbase is not None:
            self._showbase.destroy()
            self._showbase = None


def ram_image_bytes(texture: TextureHandle) -> bytes:
    """
    RAM image of a texture in RGBA order, encoded in the texture's declared
    format. Panda3D extracts half float textures as 32-bit floats, so the
    texels are converted whenever the component widths differ.
    """
    tex = texture.native
    if texture.format.channels == 1:
        data = bytes(tex.get_ram_image())
    else:
        # Panda3D keeps RAM images in BGRA order, ask for RGBA explicitly
        data = bytes(tex.get_ram_image_as("RGBA"))

    width = tex.get_component_width()
    if _RAM_DTYPES.get(width) == texture.format.dtype:
        return data
    if width not in _RAM_DTYPES:
        raise BackendCapabilityError(f"unexpected {width} byte components in readback", resource=texture.name)
    return np.frombuffer(data, dtype=_RAM_DTYPES[width]).astype(texture.format.dtype).tobytes()
