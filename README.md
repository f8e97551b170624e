# freebird converter

A small desktop converter for media files. It drives `ffmpeg` to re-encode a
file with a video, audio or subtitle encoder into another container. The lists
of encoders, container formats and pixel formats are read from your own
`ffmpeg` build (`ffmpeg -encoders`, `-formats` and `-pix_fmts`), so the
converter offers whatever that build supports.

## Requirements

- Python 3.10 or newer, with Tkinter (on some Linux distributions this is a
  separate system package)
- `ffmpeg` on your `PATH`

## Installing

    pip install .

## Using the converter

Start the window with:

    freebird-converter

On Windows this first checks that `ffmpeg` is on `PATH` and, if it is not,
offers to install it (see below).

1. Choose the input file with the first **Browse...** button.
2. Choose an output folder with the second one. Without it, the output is
   written next to the input file. The output file is named after the input
   file's stem with the chosen container as extension, e.g. `clip.mkv`, and
   an existing file of that name is overwritten.
3. Pick an encoder, a container format and, for video, a pixel format. The
   first entry of each list is selected at start. Choosing an encoder also
   decides whether it is used for the video, audio or subtitle stream.
   Hovering over a list shows details of the selected entry.
4. Set the parameters (defaults: bitrate `2000`, crf `21`, GOP `120`):
   - **Bitrate**, such as `2000k` or `2M`. It is only used when **crf** is
     empty, as `-b:v` for video and `-b:a` for audio.
   - **crf**, the quality value. It becomes the encoder's own option:
     `-crf` for x264/x265/VPX/AOM/SVT-AV1, `-cq` for NVENC, `-global_quality`
     for QSV, `-qp` for rav1e and VA-API, `-q:v` for Theora, MJPEG, WMV,
     MS-MPEG4 and H.263, `-vbr` for Opus and FDK-AAC, `-compression_level`
     for FLAC and ALAC, `-q:a` for most other audio encoders. It is ignored
     for G.722, G.726 and PCM audio.
   - **Preset**, passed as `-preset` or the encoder's equivalent
     (`-quality`, `-compression_level`, ...). Audio encoders without such an
     option ignore it.
   - **GOP**, the keyframe interval, passed as `-g` for video. It must be a
     whole number.
5. Press **Run**. The output of `ffmpeg`, tagged `[stdout]` or `[stderr]`,
   appears in the log below, followed by the exit status. **Stop** kills the
   running conversion.

Invalid settings — no encoder, no container, a missing input file or a GOP
that is not a whole number — are reported at the top of the window and
nothing is started. Questionable but usable values (an unusual bitrate, a
non-numeric video quality, a missing output folder) are only logged as
warnings.

## Installing ffmpeg on Windows

    freebird-install-ffmpeg

The command checks `PATH` first. If `ffmpeg` is missing it asks before
installing; if `%LOCALAPPDATA%\ffmpeg\bin\ffmpeg.exe` already exists it only
adds that folder to your user `PATH`. Otherwise it opens a new console window
that downloads and unpacks the archive into `%LOCALAPPDATA%\ffmpeg` and adds
its `bin` folder to your user `PATH` (with `setx`).

No download address is built in: set the environment variable
`FREEBIRD_FFMPEG_URL` to the address of an ffmpeg zip archive that contains a
`bin` folder. To run the download and installation straight away in the
current window, without the question, run:

    freebird-install-ffmpeg --install-ffmpeg

On other systems the check reports that it is only supported on Windows;
install `ffmpeg` with your package manager instead.

## Using it as a library

The command building and output parsing work without the window:

```python
from pathlib import Path
from freebird_converter.ffmpeg import (
    TranscodeError,
    build_ffmpeg_command,
    get_encoders,
    validate_transcode_params,
)

encoders = get_encoders()
validate_transcode_params("libx264", True, False, False, "mkv", "yuv420p",
                          "2000", "21", "120", Path("clip.mp4"), None)
argv = build_ffmpeg_command("libx264", True, False, False, "mkv", "yuv420p",
                            "2000", "21", "medium", "120", Path("clip.mp4"), None)
# ['ffmpeg', '-y', '-hide_banner', '-i', 'clip.mp4', '-c:v', 'libx264',
#  '-pix_fmt', 'yuv420p', '-g', '120', '-crf', '21', '-preset', 'medium', 'clip.mkv']
```

`build_ffmpeg_command` returns the argument list; both functions raise
`TranscodeError` when a parameter is invalid. `parse_encoders_output`,
`parse_formats_output` and `parse_pixel_formats_output` read text you already
have and return `EncoderInfo`, `FormatInfo` and `PixelFormatInfo` records
(from `freebird_converter.models`); `get_colors` returns the lines of
`ffmpeg -colors`. `VideoEncoderClass` and `AudioEncoderClass` map an encoder
name to the option names used above.

## What it does not do

The converter handles one input file at a time with a single encoder. It has
no batch queue, no trimming, cutting or filters, no progress bar for a
conversion and no media preview or player.