import sys
import tkinter as tk
from tkinter import ttk

from tabs.coloring_editor import ColoringEditorFrame


class ColorBookApp(tk.Tk):
    def __init__(self, initial_image=None):
        super().__init__()
        self.title('ColorBook - Line Art Coloring')
        self.geometry('1100x760')

        self.statusbar = ttk.Label(self, text='Ready')
        self.statusbar.pack(fill='x', side='bottom')

        self._editor_frame = ColoringEditorFrame(self, status_callback=self.set_status)
        self._editor_frame.pack(fill='both', expand=True)
        if initial_image:
            # Wait for the canvas to get its real size before fitting
            self.after(150, lambda: self._editor_frame.load(initial_image, label=initial_image))

    def set_status(self, txt):
        self.statusbar.config(text=txt)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    app = ColorBookApp(initial_image=argv[0] if argv else None)
    app.mainloop()


if __name__ == '__main__':
    main()
