"""Descriptions of ffmpeg encoders, container formats and pixel formats."""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class EncoderInfo:
    """One encoder as listed by ``ffmpeg -encoders``."""

    name: str
    description: str
    is_video: bool = False
    is_audio: bool = False
    is_subtitle: bool = False
    is_frame_multithreading: bool = False
    is_slice_multithreading: bool = False
    is_experimental: bool = False


@dataclass(frozen=True)
class FormatInfo:
    """One container format as listed by ``ffmpeg -formats``."""

    name: str
    description: str
    can_mux: bool = False
    can_demux: bool = False


@dataclass(frozen=True)
class PixelFormatInfo:
    """One pixel format as listed by ``ffmpeg -pix_fmts``."""

    name: str
    input_ok: bool = False
    output_ok: bool = False
    bits_per_pixel: int = 0


class VideoEncoderClass(enum.Enum):
    """Families of video encoders that share option names."""

    SOFTWARE_X264 = "software_x264"
    SOFTWARE_X265 = "software_x265"
    SOFTWARE_VPX = "software_vpx"
    SOFTWARE_AOM = "software_aom"
    SOFTWARE_SVT_AV1 = "software_svt_av1"
    SOFTWARE_RAV1E = "software_rav1e"
    SOFTWARE_THEORA = "software_theora"
    NVIDIA_NVENC = "nvidia_nvenc"
    INTEL_QSV = "intel_qsv"
    AMD_AMF = "amd_amf"
    APPLE_VIDEOTOOLBOX = "apple_videotoolbox"
    VAAPI = "vaapi"
    MJPEG = "mjpeg"
    WMV = "wmv"
    MSMPEG4 = "msmpeg4"
    H263 = "h263"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> VideoEncoderClass:
        """Classify an encoder by its ffmpeg name."""
        exact = _VIDEO_EXACT_NAMES.get(name)
        if exact is not None:
            return exact
        for fragment, member in _VIDEO_NAME_FRAGMENTS:
            if fragment in name:
                return member
        if name in ("mjpeg", "mjpeg_qsv"):
            return cls.MJPEG
        if name.startswith("wmv"):
            return cls.WMV
        if name in ("msmpeg4", "msmpeg4v2", "msmpeg4v3"):
            return cls.MSMPEG4
        if name in ("h263", "h263p"):
            return cls.H263
        return cls.OTHER

    def quality_param(self) -> str:
        """The option that sets constant quality for this family."""
        return _VIDEO_QUALITY_PARAMS.get(self, "-crf")

    def preset_param(self) -> str:
        """The option that sets the encoding preset for this family."""
        return _VIDEO_PRESET_PARAMS.get(self, "-preset")


_VIDEO_EXACT_NAMES = {
    "libx264": VideoEncoderClass.SOFTWARE_X264,
    "libx264rgb": VideoEncoderClass.SOFTWARE_X264,
    "libx265": VideoEncoderClass.SOFTWARE_X265,
    "libvpx": VideoEncoderClass.SOFTWARE_VPX,
    "libvpx-vp9": VideoEncoderClass.SOFTWARE_VPX,
    "libaom-av1": VideoEncoderClass.SOFTWARE_AOM,
    "libsvtav1": VideoEncoderClass.SOFTWARE_SVT_AV1,
    "librav1e": VideoEncoderClass.SOFTWARE_RAV1E,
    "libtheora": VideoEncoderClass.SOFTWARE_THEORA,
}

_VIDEO_NAME_FRAGMENTS = (
    ("nvenc", VideoEncoderClass.NVIDIA_NVENC),
    ("qsv", VideoEncoderClass.INTEL_QSV),
    ("amf", VideoEncoderClass.AMD_AMF),
    ("videotoolbox", VideoEncoderClass.APPLE_VIDEOTOOLBOX),
    ("vaapi", VideoEncoderClass.VAAPI),
)

_VIDEO_QUALITY_PARAMS = {
    VideoEncoderClass.SOFTWARE_X264: "-crf",
    VideoEncoderClass.SOFTWARE_X265: "-crf",
    VideoEncoderClass.SOFTWARE_VPX: "-crf",
    VideoEncoderClass.SOFTWARE_AOM: "-crf",
    VideoEncoderClass.SOFTWARE_SVT_AV1: "-crf",
    VideoEncoderClass.SOFTWARE_RAV1E: "-qp",
    VideoEncoderClass.SOFTWARE_THEORA: "-q:v",
    VideoEncoderClass.NVIDIA_NVENC: "-cq",
    VideoEncoderClass.INTEL_QSV: "-global_quality",
    VideoEncoderClass.AMD_AMF: "-qp_i",
    VideoEncoderClass.APPLE_VIDEOTOOLBOX: "-quality",
    VideoEncoderClass.VAAPI: "-qp",
    VideoEncoderClass.MJPEG: "-q:v",
    VideoEncoderClass.WMV: "-q:v",
    VideoEncoderClass.MSMPEG4: "-q:v",
    VideoEncoderClass.H263: "-q:v",
    VideoEncoderClass.OTHER: "-crf",
}

_VIDEO_PRESET_PARAMS = {
    VideoEncoderClass.AMD_AMF: "-quality",
    VideoEncoderClass.APPLE_VIDEOTOOLBOX: "-preset",
    VideoEncoderClass.VAAPI: "-compression_level",
    VideoEncoderClass.MJPEG: "-compression_level",
    VideoEncoderClass.WMV: "-q:v",
    VideoEncoderClass.MSMPEG4: "-q:v",
    VideoEncoderClass.H263: "-q:v",
}


class AudioEncoderClass(enum.Enum):
    """Families of audio encoders that share option names."""

    LIBMP3LAME = "libmp3lame"
    AAC = "aac"
    LIBFDK_AAC = "libfdk_aac"
    LIBOPUS = "libopus"
    LIBVORBIS = "libvorbis"
    AC3 = "ac3"
    EAC3 = "eac3"
    LIBTWOLAME = "libtwolame"
    LIBSHINE = "libshine"
    LIBSPEEX = "libspeex"
    LIBGSM = "libgsm"
    LIBILBC = "libilbc"
    G722 = "g722"
    G726 = "g726"
    FLAC = "flac"
    ALAC = "alac"
    PCM = "pcm"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> AudioEncoderClass:
        """Classify an encoder by its ffmpeg name."""
        if name.startswith("pcm_"):
            return cls.PCM
        if name in ("pcm", "other"):
            return cls.OTHER
        try:
            return cls(name)
        except ValueError:
            return cls.OTHER

    def quality_param(self) -> str | None:
        """The option that sets quality, or None if the encoder has none."""
        if self in (AudioEncoderClass.G722, AudioEncoderClass.G726, AudioEncoderClass.PCM):
            return None
        return _AUDIO_QUALITY_PARAMS.get(self, "-q:a")

    def supports_q_scale(self) -> bool:
        """Whether the encoder accepts the classic ``-q:a`` scale."""
        return self in (
            AudioEncoderClass.LIBMP3LAME,
            AudioEncoderClass.AAC,
            AudioEncoderClass.LIBVORBIS,
            AudioEncoderClass.LIBTWOLAME,
            AudioEncoderClass.OTHER,
        )

    def preset_param(self) -> str | None:
        """The option a preset maps to, or None if presets are ignored."""
        return _AUDIO_PRESET_PARAMS.get(self)


_AUDIO_QUALITY_PARAMS = {
    AudioEncoderClass.LIBOPUS: "-vbr",
    AudioEncoderClass.LIBFDK_AAC: "-vbr",
    AudioEncoderClass.FLAC: "-compression_level",
    AudioEncoderClass.ALAC: "-compression_level",
    AudioEncoderClass.LIBSHINE: "-q",
    AudioEncoderClass.LIBSPEEX: "-q",
}

_AUDIO_PRESET_PARAMS = {
    AudioEncoderClass.LIBOPUS: "-compression_level",
    AudioEncoderClass.FLAC: "-compression_level",
    AudioEncoderClass.ALAC: "-compression_level",
    AudioEncoderClass.LIBVORBIS: "-q:a",
}