import tkinter as tk
from tkinter import ttk
from PIL import Image, ImageTk
import cv2


def to_photoimage_from_rgba_with_scale(rgba, scale=1.0, interpolation=Image.BILINEAR):
    """Convert an RGB/RGBA/gray numpy array to a Tk PhotoImage (optional scaling).

    Args:
        rgba: RGBA, RGB or grayscale numpy array
        scale: Scale factor (default=1.0)
        interpolation: PIL interpolation mode used between 1x and 2x
    """
    if rgba is None:
        return ImageTk.PhotoImage(Image.new('RGB', (1, 1)))
    if scale is None:
        scale = 1.0

    scale = float(scale)
    if scale == 1.0:
        return ImageTk.PhotoImage(Image.fromarray(rgba))

    new_w = max(1, int(round(rgba.shape[1] * scale)))
    new_h = max(1, int(round(rgba.shape[0] * scale)))

    # Large upscaling -> Nearest Neighbor (crisp line art pixels)
    # Downscaling -> Area (best quality)
    if scale >= 2.0:
        cv_interp = cv2.INTER_NEAREST
    elif scale < 1.0:
        cv_interp = cv2.INTER_AREA
    elif interpolation == Image.NEAREST:
        cv_interp = cv2.INTER_NEAREST
    elif interpolation == Image.BICUBIC:
        cv_interp = cv2.INTER_CUBIC
    else:
        cv_interp = cv2.INTER_LINEAR

    resized = cv2.resize(rgba, (new_w, new_h), interpolation=cv_interp)
    return ImageTk.PhotoImage(Image.fromarray(resized))


def make_slider_row(parent, label_text, var, frm, to, is_int=False, command=None):
    """Create a labeled slider with a live value label; returns the Scale widget."""
    if command is None:
        def command(_=None):
            return
    ttk.Label(parent, text=label_text).pack(side='left', padx=(6, 2))
    scale = ttk.Scale(parent, from_=frm, to=to, variable=var, command=command, length=120)
    scale.pack(side='left')
    val_var = tk.StringVar()

    def _update_val(*a):
        try:
            v = var.get()
            val_var.set(f"{int(round(v))}" if is_int else f"{v:.1f}")
        except (tk.TclError, ValueError):
            val_var.set('')

    _update_val()
    var.trace_add('write', lambda *a: _update_val())
    ttk.Label(parent, textvariable=val_var, width=4, anchor='e').pack(side='left', padx=(2, 6))
    return scale
