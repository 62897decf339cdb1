"""
Coloring editor frame: paint a line-art page with brush, eraser and bucket fill.
"""

import os
import tkinter as tk
from tkinter import colorchooser, filedialog, messagebox, simpledialog, ttk

from PIL import Image

from coloring_book import ColoringSession, ColoringError, ImageLoadError, encode_png
from coloring_book.defaults import DEFAULT_BRUSH_WIDTH, DEFAULT_COLOR, FIT_PADDING
from coloring_book.log_utils import get_logger
from coloring_book.tool_controller import BRUSH, ERASER, FILL, PAN, PRIMARY, SECONDARY, MIDDLE
from coloring_book.ui_helpers import make_slider_row, to_photoimage_from_rgba_with_scale

logger = get_logger('ColoringEditor')

IMAGE_TYPES = [("Images", ("*.png", "*.jpg", "*.jpeg", "*.bmp", "*.tif", "*.tiff", "*.webp"))]


class ColoringEditorFrame(tk.Frame):
    """Embeddable coloring editor as a tkinter Frame."""
    def __init__(self, master=None, status_callback=None):
        super().__init__(master)
        self._status_cb = status_callback or (lambda txt: None)

        # Data
        self.session = None
        self._source_path = None
        self._progress_path = None
        self._photo = None
        self._move_counter = 0
        self._user_zoomed = False

        # Toolbar
        self.toolbar = ttk.Frame(self)
        self.toolbar.pack(side="top", fill="x")
        ttk.Button(self.toolbar, text="Open Image", command=self.open_image).pack(side="left")
        ttk.Button(self.toolbar, text="Open URL", command=self.open_url).pack(side="left")
        ttk.Button(self.toolbar, text="Save Coloring…", command=self.save_coloring).pack(side="left")
        ttk.Button(self.toolbar, text="Save Progress…", command=self.save_progress).pack(side="left")
        ttk.Button(self.toolbar, text="Load Progress…", command=self.load_progress).pack(side="left")
        ttk.Separator(self.toolbar, orient="vertical").pack(side="left", fill="y", padx=6)

        self.mode_var = tk.StringVar(value=FILL)
        for label, mode in (("Fill", FILL), ("Brush", BRUSH), ("Eraser", ERASER), ("Pan", PAN)):
            ttk.Radiobutton(self.toolbar, text=label, value=mode, variable=self.mode_var,
                            command=lambda m=mode: self._set_mode(m)).pack(side="left")
        ttk.Separator(self.toolbar, orient="vertical").pack(side="left", fill="y", padx=6)

        self.color_var = tk.StringVar(value=DEFAULT_COLOR)
        self.color_swatch = tk.Label(self.toolbar, width=3, bg=DEFAULT_COLOR, relief="sunken")
        self.color_swatch.pack(side="left", padx=(0, 2))
        ttk.Button(self.toolbar, text="Color…", command=self.pick_color).pack(side="left")
        self.brush_var = tk.DoubleVar(value=float(DEFAULT_BRUSH_WIDTH))
        make_slider_row(self.toolbar, "Brush", self.brush_var, 1, 60, is_int=True, command=self._on_brush_changed)

        # Palette swatches extracted from the loaded page
        self.palette_bar = ttk.Frame(self)
        self.palette_bar.pack(side="top", fill="x")

        self.canvas = tk.Canvas(self, bg="#e7e5e4", highlightthickness=0, cursor="crosshair")
        self.canvas.pack(side="top", fill="both", expand=True)
        self.status = ttk.Label(self, text="Open a line-art image to start coloring")
        self.status.pack(side="bottom", fill="x")

        self.canvas.bind("<Configure>", self._on_canvas_configure)
        self.canvas.bind("<ButtonPress-1>", lambda e: self._on_press(e, PRIMARY))
        self.canvas.bind("<B1-Motion>", self._on_drag)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<ButtonPress-3>", lambda e: self._on_press(e, SECONDARY))
        self.canvas.bind("<B3-Motion>", self._on_drag)
        self.canvas.bind("<ButtonRelease-3>", self._on_release)
        self.canvas.bind("<ButtonPress-2>", lambda e: self._on_press(e, MIDDLE))
        self.canvas.bind("<B2-Motion>", self._on_drag)
        self.canvas.bind("<ButtonRelease-2>", self._on_release)
        self.canvas.bind("<MouseWheel>", self._on_mouse_wheel)
        # X11 delivers the wheel as buttons 4/5
        self.canvas.bind("<Button-4>", lambda e: self._on_mouse_wheel(e, 120))
        self.canvas.bind("<Button-5>", lambda e: self._on_mouse_wheel(e, -120))

        self._bind_to_toplevel("<Key-f>", lambda e: self._set_mode(FILL))
        self._bind_to_toplevel("<Key-b>", lambda e: self._set_mode(BRUSH))
        self._bind_to_toplevel("<Key-e>", lambda e: self._set_mode(ERASER))
        self._bind_to_toplevel("<Key-p>", lambda e: self._set_mode(PAN))

    def _bind_to_toplevel(self, sequence, func):
        try: self.winfo_toplevel().bind(sequence, func)
        except tk.TclError: self.bind(sequence, func)

    def set_status(self, text):
        self.status.config(text=text)
        self._status_cb(text)

    # Loading / saving

    def open_image(self):
        path = filedialog.askopenfilename(parent=self.winfo_toplevel(), title="Open line art", filetypes=IMAGE_TYPES)
        if not path: return
        self.load(path, label=os.path.basename(path))
        self._source_path = path

    def open_url(self):
        url = simpledialog.askstring("Open URL", "Image URL:", parent=self.winfo_toplevel())
        if not url: return
        self.load(url.strip(), label=url.strip())
        self._source_path = None

    def load(self, source, label="image", snapshot=None):
        """Build a new session; the current one stays untouched if loading fails."""
        try:
            session = ColoringSession.load(
                source, snapshot=snapshot,
                on_content_changed=self._on_content_changed,
                on_fill_result=self._on_fill_result,
            )
        except ImageLoadError as e:
            logger.info(f"Load failed for {label}: {e}")
            messagebox.showerror("Open error", f"Failed to load the image:\n{e}")
            return False
        self.session = session
        self._progress_path = None
        session.controller.set_mode(self.mode_var.get())
        session.controller.set_color(self.color_var.get())
        session.controller.set_brush_width(max(1.0, float(self.brush_var.get())))
        self._user_zoomed = False
        self._fit()
        self._build_palette()
        self.set_status(f"Loaded: {label} - {session.width}x{session.height}")
        return True

    def save_coloring(self):
        if self.session is None: messagebox.showinfo("Nothing to save", "Open an image first"); return
        path = filedialog.asksaveasfilename(parent=self.winfo_toplevel(), title="Save coloring", defaultextension=".png",
                                            filetypes=[("PNG", "*.png")])
        if not path: return
        try:
            with open(path, 'wb') as f:
                f.write(self.session.export_composite_png())
            self.set_status(f"Saved: {os.path.basename(path)}")
        except (OSError, ColoringError) as e:
            messagebox.showerror("Save error", str(e))

    def save_progress(self):
        if self.session is None: messagebox.showinfo("Nothing to save", "Open an image first"); return
        path = filedialog.asksaveasfilename(parent=self.winfo_toplevel(), title="Save progress", defaultextension=".png",
                                            filetypes=[("PNG", "*.png")])
        if not path: return
        self._progress_path = path
        self._write_progress(self.session.snapshot_png())
        self.set_status(f"Progress saved to {os.path.basename(path)}; changes will be kept there")

    def load_progress(self):
        if self.session is None: messagebox.showinfo("No page", "Open the matching image first"); return
        path = filedialog.askopenfilename(parent=self.winfo_toplevel(), title="Load progress", filetypes=[("PNG", "*.png")])
        if not path: return
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            messagebox.showerror("Open error", str(e)); return
        if self.session.restore_snapshot(data):
            self._progress_path = path
            self.set_status(f"Restored progress from {os.path.basename(path)}")
        else:
            messagebox.showwarning("Restore error", "That progress file belongs to a different page.\nStarting from a blank page.")
            self.set_status("Progress did not match; started blank")
        self._refresh_display()

    def _write_progress(self, png_bytes):
        if not self._progress_path: return
        try:
            with open(self._progress_path, 'wb') as f:
                f.write(png_bytes)
        except OSError as e:
            logger.info(f"Autosave failed: {e}")
            self.set_status(f"Autosave failed: {e}")

    # Session callbacks

    def _on_content_changed(self, snapshot):
        if self._progress_path:
            self._write_progress(encode_png(snapshot))

    def _on_fill_result(self, count, erase_mode):
        self.bell()
        self.set_status(f"{'Cleared' if erase_mode else 'Filled'} {count} px")

    # Tool settings

    def _set_mode(self, mode):
        self.mode_var.set(mode)
        self.canvas.config(cursor={PAN: "fleur", FILL: "crosshair"}.get(mode, "pencil"))
        if self.session is not None:
            self.session.controller.set_mode(mode)

    def pick_color(self):
        _, hex_color = colorchooser.askcolor(color=self.color_var.get(), parent=self.winfo_toplevel())
        if hex_color: self._set_color(hex_color)

    def _set_color(self, hex_color):
        self.color_var.set(hex_color)
        self.color_swatch.config(bg=hex_color)
        if self.session is not None:
            self.session.controller.set_color(hex_color)

    def _on_brush_changed(self, _=None):
        if self.session is not None:
            self.session.controller.set_brush_width(max(1.0, round(float(self.brush_var.get()))))

    def _build_palette(self):
        for child in self.palette_bar.winfo_children():
            child.destroy()
        if self.session is None: return
        for hex_color in self.session.palette():
            sw = tk.Label(self.palette_bar, width=2, bg=hex_color, relief="raised")
            sw.pack(side="left", padx=1, pady=2)
            sw.bind("<Button-1>", lambda e, c=hex_color: self._set_color(c))

    # View

    def _fit(self):
        if self.session is None: return
        cw = max(1, self.canvas.winfo_width()); ch = max(1, self.canvas.winfo_height())
        self.session.fit_to_screen(cw, ch, padding=FIT_PADDING)
        self._refresh_display()

    def _on_canvas_configure(self, event=None):
        if self._user_zoomed: self._refresh_display()
        else: self._fit()

    def _refresh_display(self):
        self.canvas.delete("all")
        if self.session is None: return
        vt = self.session.viewport
        cw = max(1, self.canvas.winfo_width()); ch = max(1, self.canvas.winfo_height())
        visible = vt.visible_region(cw, ch, self.session.width, self.session.height)
        if visible is None: return
        (ix0, iy0, ix1, iy1), (sx, sy) = visible
        region = self.session.export_composite()[iy0:iy1, ix0:ix1]
        interp = Image.NEAREST if self.session.controller.is_drawing else Image.BILINEAR
        self._photo = to_photoimage_from_rgba_with_scale(region, scale=vt.zoom, interpolation=interp)
        self.canvas.create_image(int(round(sx)), int(round(sy)), anchor="nw", image=self._photo)

    # Pointer events

    def _on_press(self, event, button):
        if self.session is None: return
        self.session.controller.start(event.x, event.y, button)
        self._move_counter = 0
        self._refresh_display()

    def _on_drag(self, event):
        if self.session is None: return
        ctl = self.session.controller
        ctl.move(event.x, event.y)
        if ctl.is_panning:
            self._user_zoomed = True
            self._refresh_display(); return
        # Update display every 3 paint events to reduce lag
        self._move_counter += 1
        if self._move_counter >= 3:
            self._refresh_display()
            self._move_counter = 0

    def _on_release(self, event):
        if self.session is None: return
        self.session.controller.end(event.x, event.y)
        self._refresh_display()

    def _on_mouse_wheel(self, event, delta=None):
        if self.session is None: return
        if delta is None:
            delta = int(getattr(event, "delta", 0))
        if self.session.controller.wheel(event.x, event.y, delta):
            self._user_zoomed = True
            self._refresh_display()
