"""Bead pattern editor GUI."""

import sys
from pathlib import Path

from PIL import Image
from PySide6.QtCore import QObject, QThread, Qt, Signal, Slot
from PySide6.QtGui import QColor, QImage, QMouseEvent, QPainter, QPixmap, QWheelEvent
from PySide6.QtWidgets import (
    QApplication, QColorDialog, QComboBox, QFileDialog, QFormLayout,
    QGraphicsPixmapItem, QGraphicsScene, QGraphicsView, QGridLayout,
    QGroupBox, QHBoxLayout, QLabel, QLineEdit, QMainWindow, QMessageBox,
    QPushButton, QSlider, QSpinBox, QStatusBar, QVBoxLayout, QWidget,
)

from . import render
from .config import ConfigManager
from .editor import PatternEditor
from .generator import GenerationSession
from .grid import overlay_from_mask
from .normalize import slider_to_threshold

VIEW_CELL_SIZE = 20
ZOOM_STEP = 1.15
ZOOM_MAX = 12.0


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def pil_to_pixmap(pil_img: Image.Image) -> QPixmap:
    """Convert PIL Image to QPixmap."""
    data = pil_img.convert("RGBA").tobytes()
    qimg = QImage(data, pil_img.width, pil_img.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(qimg.copy())


# ---------------------------------------------------------------------------
# BoardView - zoomable pegboard that forwards pointer gestures
# ---------------------------------------------------------------------------

class BoardView(QGraphicsView):
    """Pegboard view, zoomable from fit-in-view up to ``ZOOM_MAX``.

    Mouse positions are mapped to grid cells and handed to the editor.
    """

    edited = Signal()

    def __init__(self, editor: PatternEditor, parent: QWidget | None = None):
        super().__init__(parent)
        self.editor = editor
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self._pixmap_item: QGraphicsPixmapItem | None = None
        self._zoom_level: float = 1.0  # relative to fit
        self.setMouseTracking(True)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setStyleSheet("background: #f0f0f0; border: 1px solid #ccc;")

    def refresh(self) -> None:
        ed = self.editor
        img = render.render_board(
            ed.grid, VIEW_CELL_SIZE, ed.selection, ed.drag_offset,
            ed.overlay, ed.text_tool.anchor)
        first = self._pixmap_item is None
        if first:
            self._pixmap_item = self._scene.addPixmap(pil_to_pixmap(img))
        else:
            self._pixmap_item.setPixmap(pil_to_pixmap(img))
        self._scene.setSceneRect(self._pixmap_item.boundingRect())
        if first or self._zoom_level <= 1.0:
            self._fit()

    def _cell_at(self, event: QMouseEvent) -> tuple[int, int]:
        pos = self.mapToScene(event.position().toPoint())
        return int(pos.y() // VIEW_CELL_SIZE), int(pos.x() // VIEW_CELL_SIZE)

    @staticmethod
    def _subtract(event: QMouseEvent) -> bool:
        mods = event.modifiers()
        return bool(mods & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier))

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return
        y, x = self._cell_at(event)
        self.editor.pointer_down(y, x, self._subtract(event))
        self.edited.emit()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        y, x = self._cell_at(event)
        self.editor.pointer_move(y, x, self._subtract(event))
        if self.editor.pointer_is_down or self.editor.overlay:
            self.edited.emit()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self.editor.pointer_up()
        self.edited.emit()

    def leaveEvent(self, event) -> None:  # type: ignore[override]
        if self.editor.pointer_is_down:
            self.editor.pointer_up()
            self.edited.emit()
        super().leaveEvent(event)

    def _fit(self) -> None:
        self._zoom_level = 1.0
        self.resetTransform()
        self.fitInView(self._pixmap_item, Qt.AspectRatioMode.KeepAspectRatio)

    def wheelEvent(self, event: QWheelEvent) -> None:  # type: ignore[override]
        if not self._pixmap_item:
            return
        step = ZOOM_STEP if event.angleDelta().y() > 0 else 1 / ZOOM_STEP
        level = min(ZOOM_MAX, self._zoom_level * step)
        if level <= 1.0:
            self._fit()
        elif level != self._zoom_level:
            self.scale(level / self._zoom_level, level / self._zoom_level)
            self._zoom_level = level

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        if self._pixmap_item and self._zoom_level <= 1.0:
            self._fit()


# ---------------------------------------------------------------------------
# Background generation
# ---------------------------------------------------------------------------

class GenerationWorker(QObject):
    finished = Signal()

    def __init__(self, session: GenerationSession):
        super().__init__()
        self.session = session

    @Slot()
    def run(self) -> None:
        try:
            self.session.run()
        finally:
            self.finished.emit()


class MainThreadDispatcher(QObject):
    """Runs callables handed over from worker threads on the GUI thread."""

    call = Signal(object)
    applied = Signal()

    def __init__(self) -> None:
        super().__init__()
        self.call.connect(self._invoke, Qt.ConnectionType.QueuedConnection)

    @Slot(object)
    def _invoke(self, fn) -> None:
        fn()
        self.applied.emit()


# ---------------------------------------------------------------------------
# ToolPanel
# ---------------------------------------------------------------------------

class ToolPanel(QWidget):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setFixedWidth(270)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        # Image
        image_group = QGroupBox("Image")
        il = QVBoxLayout(image_group)
        self.open_btn = QPushButton("Open image…")
        self.regen_btn = QPushButton("Regenerate")
        il.addWidget(self.open_btn)
        il.addWidget(self.regen_btn)
        layout.addWidget(image_group)

        # Grid
        grid_group = QGroupBox("Grid")
        gl = QFormLayout(grid_group)
        self.width_spin = QSpinBox()
        self.width_spin.setRange(1, 400)
        gl.addRow("Width:", self.width_spin)
        self.height_spin = QSpinBox()
        self.height_spin.setRange(1, 400)
        gl.addRow("Height:", self.height_spin)
        self.scale_spin = QSpinBox()
        self.scale_spin.setRange(1, 500)
        self.scale_spin.setSuffix(" %")
        gl.addRow("Scale:", self.scale_spin)
        layout.addWidget(grid_group)

        # Tools
        tool_group = QGroupBox("Tools")
        tl = QFormLayout(tool_group)
        self.tool_combo = QComboBox()
        self.tool_combo.addItems(["paint", "erase", "eyedropper", "bucket", "select", "text"])
        tl.addRow("Tool:", self.tool_combo)
        self.select_mode_combo = QComboBox()
        self.select_mode_combo.addItems(["single", "region"])
        tl.addRow("Select:", self.select_mode_combo)
        self.color_btn = QPushButton()
        tl.addRow("Color:", self.color_btn)
        self.text_edit = QLineEdit()
        self.text_edit.setPlaceholderText("Text to stamp")
        self.stamp_btn = QPushButton("Place text")
        tl.addRow(self.text_edit)
        tl.addRow(self.stamp_btn)
        layout.addWidget(tool_group)

        # Colors
        color_group = QGroupBox("Colors")
        cl = QFormLayout(color_group)
        self.normalize_slider = QSlider(Qt.Orientation.Horizontal)
        self.normalize_slider.setRange(0, 100)
        self.normalize_slider.setValue(20)
        cl.addRow("Merge:", self.normalize_slider)
        self.normalize_btn = QPushButton("Merge similar colors")
        cl.addRow(self.normalize_btn)
        layout.addWidget(color_group)

        # Pan
        pan_group = QGroupBox("Pan")
        pgl = QGridLayout(pan_group)
        self.pan_btns = {
            "up": QPushButton("▲"), "down": QPushButton("▼"),
            "left": QPushButton("◀"), "right": QPushButton("▶"),
        }
        self.recenter_btn = QPushButton("●")
        pgl.addWidget(self.pan_btns["up"], 0, 1)
        pgl.addWidget(self.pan_btns["left"], 1, 0)
        pgl.addWidget(self.recenter_btn, 1, 1)
        pgl.addWidget(self.pan_btns["right"], 1, 2)
        pgl.addWidget(self.pan_btns["down"], 2, 1)
        layout.addWidget(pan_group)

        # Edit
        edit_row = QHBoxLayout()
        self.undo_btn = QPushButton("Undo")
        self.redo_btn = QPushButton("Redo")
        self.clear_btn = QPushButton("Clear")
        edit_row.addWidget(self.undo_btn)
        edit_row.addWidget(self.redo_btn)
        edit_row.addWidget(self.clear_btn)
        layout.addLayout(edit_row)

        # Files
        file_group = QGroupBox("Files")
        fl = QVBoxLayout(file_group)
        self.import_btn = QPushButton("Import JSON…")
        self.export_json_btn = QPushButton("Export JSON…")
        self.export_png_btn = QPushButton("Export PNG…")
        fl.addWidget(self.import_btn)
        fl.addWidget(self.export_json_btn)
        fl.addWidget(self.export_png_btn)
        layout.addWidget(file_group)

        self.legend_label = QLabel()
        self.legend_label.setWordWrap(True)
        layout.addWidget(self.legend_label)
        layout.addStretch()

    def set_color_swatch(self, color: str) -> None:
        self.color_btn.setText(color)
        self.color_btn.setStyleSheet(f"background: {color};")


# ---------------------------------------------------------------------------
# MainWindow
# ---------------------------------------------------------------------------

class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("beadboard")
        self.resize(1200, 850)

        self._dispatcher = MainThreadDispatcher()
        self._threads: list[tuple[QThread, GenerationWorker]] = []
        self.editor = PatternEditor(
            ConfigManager().load(),
            dispatch=self._dispatcher.call.emit,
            runner=self._run_session,
        )

        central = QWidget()
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)
        self.panel = ToolPanel()
        self.board = BoardView(self.editor)
        main_layout.addWidget(self.panel)
        main_layout.addWidget(self.board, stretch=1)
        self.setCentralWidget(central)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self._sync_controls()

        p = self.panel
        p.open_btn.clicked.connect(self._open_image)
        p.regen_btn.clicked.connect(self._regenerate)
        p.width_spin.editingFinished.connect(self._on_size_changed)
        p.height_spin.editingFinished.connect(self._on_size_changed)
        p.scale_spin.editingFinished.connect(self._on_scale_changed)
        p.tool_combo.currentTextChanged.connect(self._on_tool_changed)
        p.select_mode_combo.currentTextChanged.connect(self._on_select_mode_changed)
        p.color_btn.clicked.connect(self._pick_color)
        p.stamp_btn.clicked.connect(self._place_text)
        p.normalize_btn.clicked.connect(self._normalize)
        for direction, btn in p.pan_btns.items():
            btn.clicked.connect(lambda _=False, d=direction: self._edit(self.editor.pan, d))
        p.recenter_btn.clicked.connect(lambda: self._edit(self.editor.recenter))
        p.undo_btn.clicked.connect(lambda: self._edit(self.editor.undo))
        p.redo_btn.clicked.connect(lambda: self._edit(self.editor.redo))
        p.clear_btn.clicked.connect(lambda: self._edit(self.editor.clear))
        p.import_btn.clicked.connect(self._import_json)
        p.export_json_btn.clicked.connect(self._export_json)
        p.export_png_btn.clicked.connect(self._export_png)
        self.board.edited.connect(self._refresh)
        self._dispatcher.applied.connect(self._on_generated)

        self._refresh()

    # -- generation plumbing ------------------------------------------------

    def _run_session(self, session: GenerationSession) -> None:
        thread = QThread()
        worker = GenerationWorker(session)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(thread.quit)
        thread.finished.connect(lambda: self._forget_thread(thread))
        self._threads.append((thread, worker))
        self.status_bar.showMessage("Generating…")
        thread.start()

    def _forget_thread(self, thread: QThread) -> None:
        self._threads = [(t, w) for t, w in self._threads if t is not thread]

    def _on_generated(self) -> None:
        self.status_bar.showMessage("Pattern generated", 3000)
        self._refresh()

    # -- helpers -------------------------------------------------------------

    def _edit(self, fn, *args) -> None:
        fn(*args)
        self._sync_controls()
        self._refresh()

    def _sync_controls(self) -> None:
        p, ed = self.panel, self.editor
        for spin, value in ((p.width_spin, ed.size.width), (p.height_spin, ed.size.height),
                            (p.scale_spin, ed.scale)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)
        p.tool_combo.blockSignals(True)
        p.tool_combo.setCurrentText(ed.tool.name)
        p.tool_combo.blockSignals(False)
        p.set_color_swatch(ed.current_color)

    def _refresh(self) -> None:
        ed = self.editor
        self.board.refresh()
        self.panel.undo_btn.setEnabled(ed.can_undo)
        self.panel.redo_btn.setEnabled(ed.can_redo)
        # eyedropper may have switched tool/color
        self._sync_controls()
        usage = ed.color_counts()
        total = sum(n for _, n in usage)
        lines = [f"{len(usage)} colors, {total} beads"]
        lines += [f"{c}: {n}" for c, n in usage[:12]]
        self.panel.legend_label.setText("\n".join(lines))

    # -- slots ---------------------------------------------------------------

    def _open_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open image", "", "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)")
        if not path:
            return
        self.editor.load_image(Path(path))
        self.status_bar.showMessage(Path(path).name)

    def _regenerate(self) -> None:
        if self.editor.regenerate() is None:
            self.status_bar.showMessage("No image loaded", 3000)

    def _on_size_changed(self) -> None:
        p = self.panel
        self._edit(self.editor.set_grid_size, p.width_spin.value(), p.height_spin.value())
        self.editor.regenerate()

    def _on_scale_changed(self) -> None:
        self.editor.set_scale(self.panel.scale_spin.value())

    def _on_tool_changed(self, name: str) -> None:
        self._edit(self.editor.set_tool, name)

    def _on_select_mode_changed(self, mode: str) -> None:
        self.editor.select_tool.mode = mode

    def _pick_color(self) -> None:
        color = QColorDialog.getColor(QColor(self.editor.current_color), self)
        if color.isValid():
            self.editor.current_color = color.name()
            self.panel.set_color_swatch(color.name())

    def _place_text(self) -> None:
        text = self.panel.text_edit.text().strip()
        if not text:
            return
        size = self.editor.size
        mask = render.text_mask(text, size.width, max(1, size.height // 3))
        if not mask:
            self.status_bar.showMessage("Text is too small for this grid", 3000)
            return
        self._edit(self.editor.set_overlay, overlay_from_mask(mask, self.editor.current_color))

    def _normalize(self) -> None:
        t = slider_to_threshold(self.panel.normalize_slider.value() / 100.0)
        self._edit(self.editor.normalize_colors, t)

    def _import_json(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import pattern", "", "JSON (*.json)")
        if not path:
            return
        result = self.editor.import_json(Path(path).read_text(encoding="utf-8"))
        if not result.ok:
            QMessageBox.warning(self, "Import failed", result.error or "Invalid pattern file")
            return
        self._sync_controls()
        self._refresh()

    def _export_json(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export pattern", "perler-pattern.json",
                                              "JSON (*.json)")
        if not path:
            return
        Path(path).write_text(self.editor.export_json(), encoding="utf-8")
        self.status_bar.showMessage(f"Exported: {path}")

    def _export_png(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export image", "perler-pattern.png",
                                              "PNG (*.png)")
        if not path:
            return
        render.save_png(path, self.editor.grid)
        self.status_bar.showMessage(f"Exported: {path}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
