# imgpipe

imgpipe chains simple image treatments into a pipeline. You can keep every intermediate stage, and you can apply the same chain to a still image or to every frame of a video.

## Installation

```
pip install .
```

To install the test suite and run it:

```
pip install ".[test]"
pytest
```

## Treatments (`imgpipe.treatments`)

Each treatment has a name. `available_treatments()` returns the names in this order:

| Name                            | Effect                                            |
|---------------------------------|---------------------------------------------------|
| `Flou Gaussien`                 | 15×15 Gaussian blur                               |
| `Détection de Contours (Canny)` | Canny edges, thresholds 50 / 150, as 0/255 gray   |
| `Niveaux de Gris`               | grayscale, kept as three identical channels       |
| `Rotation 90°`                  | rotate a quarter turn clockwise                   |
| `Miroir Horizontal`             | mirror left to right                              |
| `Seuillage`                     | binary threshold: gray above 128 becomes 255       |
| `Négatif`                       | bitwise inversion of every channel                |

Images are NumPy arrays in BGR channel order.

```python
from imgpipe.treatments import Treatment, apply_treatment, available_treatments, is_known

print(available_treatments())
assert is_known("Négatif")
out = apply_treatment("Miroir Horizontal", image)
out = Treatment.NEGATIVE.apply(image)
```

`apply_treatment` returns an unchanged copy of the image in three cases:

- the image is empty;
- the name is unknown;
- the treatment cannot handle the image. This case is also logged as an error.

Each operation is also available as a plain function:

- `gaussian_blur(img)`
- `canny_edges(img, low=50, high=150)`
- `to_grayscale(img)`
- `rotate_90_clockwise(img)`
- `mirror_horizontal(img)`
- `threshold(img, value=128)`
- `negative(img)`

## Pipelines (`imgpipe.pipeline`)

A `Pipeline` is an ordered list of treatment names.

- `run(image)` returns every stage: the original image, then the result after each step. An empty image gives no stages.
- `apply(image)` returns only the final image.
- `labels` lists the stage names, starting with `Original`.

```python
from imgpipe.pipeline import Pipeline, load_pipeline

pipeline = Pipeline()
pipeline.append("Niveaux de Gris")
pipeline.append("Seuillage")

stages = pipeline.run(image)   # original, then one image per step
final = pipeline.apply(image)
```

`remove_indices(indices)` removes stages by their position in `labels` and returns how many were checked. It raises `PipelineError` in two cases: nothing was given, or position 0 (`Original`) was given. Indices past the end are ignored. `clear()` raises `PipelineError` if the pipeline is already empty. `replace(names)` swaps in a new list of steps.

Pipelines are stored as plain text:

- lines that start with `#` are comments;
- blank lines are skipped;
- every other line is one treatment name.

`dump(now=None)` and `save(path, now=None)` write this format. The header holds a creation timestamp and the number of steps:

```
# Pipeline de Traitements d'Images
# Créé le 2025-01-01T12:00:00
# Nombre de traitements: 2

Niveaux de Gris
Seuillage
```

Saving an empty pipeline raises `PipelineError`.

`parse_pipeline(text)` reads text in this format and returns a `ParsedPipeline`. It holds the known `steps` and the `unknown` names that were skipped, each of which is logged as a warning. `load_pipeline(path)` reads a file the same way. It raises `PipelineError` if the file cannot be read or names no known treatment.

## Display helpers (`imgpipe.display`)

These functions prepare an image for showing in a panel of a given `(width, height)`:

- `to_rgb(img)` converts a gray, BGR or BGRA image to three-channel RGB.
- `fit_scale(image_size, panel_size, margin=0.95)` returns the scale that fits the image in the panel while keeping its ratio. It returns `None` when the panel has no area.
- `resize_to_fit(img, panel_size)` returns an RGB copy scaled by that factor, using bilinear resampling.
- `center_offset(content_size, panel_size)` returns the top-left position that centres the content in the panel.

## Video (`imgpipe.video`)

`VideoClip.load(path)` reads every frame of a file, in BGR order, together with its frame rate. The rate defaults to 30 when the file does not give one. `frame_at(index)` returns a copy of one frame.

`process_video(src, dst, pipeline, progress=None)` applies a pipeline to every frame and writes the result to `dst`:

- `src` may be a `VideoClip` or a path.
- The optional `progress(done, total)` callback is called after each frame. Returning `False` stops the processing early.
- The function returns a `ProcessResult` with `frames_written`, `total_frames`, `completed` and a `message`.
- An empty pipeline raises `PipelineError`.
- GIF, PNG/APNG and WebP outputs are written with a per-frame duration; other formats are written with a frame rate.
- `process_frames(frames, pipeline, progress=None)` is the same per-frame loop as a generator.

The formats `VideoClip.load` and `process_video` can handle depend on the imageio plugins installed. Pillow covers animated GIF, PNG and WebP. Formats such as MP4 need an additional imageio video plugin, which this package does not install.

Playback helpers:

- `format_time(seconds)` gives `MM:SS`.
- `time_label(current_frame, total_frames, fps)` gives `current / total`, or `00:00 / 00:00` when there are no frames.
- `playback_interval(fps)` gives the delay between frames in milliseconds, at least 1.

## Sessions (`imgpipe.session`)

`Session` holds one editing session:

- `original`: the source image;
- `pipeline`: the current pipeline;
- `stages`: every intermediate stage, recomputed after each change;
- `final_image`: the last stage;
- `labels`: the stage names.

Methods:

- `load_image(path)` / `set_original(image)` set the source image.
- `drop_treatment(name)` appends a treatment.
- `remove_checked(indices)` removes stages by their display position.
- `clear_pipeline()` removes every treatment.
- `save_image(path)` writes the final image; the format follows the extension.
- `save_pipeline(path, now=None)` writes the pipeline file.
- `load_pipeline(path)` replaces the pipeline with the one read from the file.
- `stage_at(index)` returns a copy of one stage.

Errors:

- Adding or loading treatments before an image is set, saving without an image, or failing to read or write an image raises `SessionError`.
- Pipeline misuse raises `PipelineError`.

`DropTarget(session).on_drop_text(x, y, data)` appends the dropped treatment name to its session. It returns `False` when no session is attached.

## Command line

```
imgpipe list
imgpipe image INPUT OUTPUT [-t NAME ...] [-p PIPELINE_FILE] [--save-pipeline FILE]
imgpipe video INPUT OUTPUT [-t NAME ...] [-p PIPELINE_FILE] [--save-pipeline FILE]
```

- `list` prints the treatment names.
- `image` and `video` build a pipeline from the treatments in `-p` first, followed by each `-t` treatment in order. They apply it and write the result.
- `--save-pipeline` also writes the pipeline file.
- `video` reports frame progress on standard error.
- Errors are printed as `Erreur: ...` on standard error, with exit status 1.

## What this package does not do

There is no graphical window, no drag-and-drop interface, no interactive video player and no webcam capture. The display, playback and drop helpers compute what such an interface would show, but nothing here opens a screen or a camera. Work is done through the library or the `imgpipe` command.