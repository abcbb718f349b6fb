import logging
from datetime import date
from functools import partial
from pathlib import Path

from PySide6.QtCore import Qt, QDate, QUrl
from PySide6.QtGui import QAction, QBrush, QColor, QDesktopServices, QFont
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QListWidget,
    QListWidgetItem,
    QGridLayout,
    QLineEdit,
    QDialog,
    QFormLayout,
    QComboBox,
    QTextEdit,
    QDateEdit,
    QDialogButtonBox,
    QMessageBox,
    QFileDialog,
    QMenuBar,
    QMenu,
    QAbstractItemView,
    QSplitter,
    QFrame,
    QStatusBar,
    QCheckBox,
    QTabWidget,
    QScrollArea,
)

from models.task import PIPE_STAGES, Category, PipeStage, Priority, Status, Task, parse_value
from services import export as export_service
from services import views
from services.csv_codec import format_value
from services.reminders import mailto_link
from services.store import QUICK_TEMPLATES, TaskStore

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {
    Priority.HIGH: "#ff6b6b",
    Priority.MEDIUM: "#ffd166",
    Priority.LOW: "#8ecae6",
}
PERIOD_CHOICES = [("Today", "today"), ("This week", "week"), ("Overdue", "overdue"), ("All", "all")]
SORT_CHOICES = [("Sort by due date", "due"), ("Sort by priority", "priority"), ("Sort by creation", "created")]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
CALENDAR_CHIPS = 4  # tasks listed per calendar day before "+N more"
CHIP_TITLE_LEN = 18

APP_STYLE = """
QFrame#details,
QFrame#column,
QFrame#kpi,
QListWidget {
background: #ffffff;
border-radius: 12px;
border: 1px solid rgba(15, 23, 34, 0.06);
}


QFrame#column {
border-style: dashed;
}


QListWidget {
padding: 8px;
}


QListWidget::item {
padding: 8px;
margin: 4px 0;
border-radius: 8px;
}


QListWidget::item:selected {
background: #e6f0ff;
color: #0f1722;
}


QLabel#kpiValue {
font-size: 16pt;
font-weight: 600;
}


QPushButton {
border: 1px solid #e6eef8;
padding: 6px 10px;
border-radius: 10px;
background: #ffffff;
}


QPushButton#addBtn {
background: qlineargradient(spread:pad, x1:0, y1:0, x2:1, y2:0, stop:0 #2563eb, stop:1 #3b82f6);
color: white;
border: none;
}


QPushButton#dangerBtn {
background: #991b1b;
color: white;
border: none;
}


QLineEdit,
QComboBox,
QDateEdit,
QTextEdit {
background: #fbfdff;
border: 1px solid #e6eef8;
border-radius: 8px;
padding: 6px;
}


QStatusBar {
background: transparent;
}
"""


def _to_qdate(d: date) -> QDate:
    return QDate(d.year, d.month, d.day)


class TaskDialog(QDialog):
    """Add / edit form. `get_task_data` returns a patch for the store, or None if invalid."""

    def __init__(self, parent=None, task: Task = None):
        super().__init__(parent)
        self.setWindowTitle("Edit task" if task else "New task")
        self.task = task
        self.build_ui()
        if task:
            self.load_task(task)
        else:
            self.due_date.setDate(QDate.currentDate())

    def build_ui(self):
        self.form = QFormLayout(self)
        self.title_edit = QLineEdit()
        self.customer_edit = QLineEdit()
        self.due_date = QDateEdit()
        self.due_date.setCalendarPopup(True)
        self.due_date.setDisplayFormat("dd/MM/yyyy")
        self.no_due_cb = QCheckBox("No due date")
        self.no_due_cb.toggled.connect(lambda checked: self.due_date.setEnabled(not checked))

        self.priority_cb = QComboBox()
        self.priority_cb.addItems([p.value for p in Priority])
        self.priority_cb.setCurrentText(Priority.MEDIUM.value)
        self.category_cb = QComboBox()
        self.category_cb.addItems([c.value for c in Category])
        self.category_cb.setCurrentText(Category.OTHER.value)
        self.status_cb = QComboBox()
        self.status_cb.addItems([s.value for s in Status])
        self.pipe_cb = QComboBox()
        self.pipe_cb.addItem("(not in pipeline)", "")
        for s in PIPE_STAGES:
            self.pipe_cb.addItem(s.value, s.value)

        self.value_edit = QLineEdit()
        self.value_edit.setPlaceholderText("Value €")
        self.channel_edit = QLineEdit()
        self.channel_edit.setPlaceholderText("Email / Phone / LinkedIn")
        self.notes_edit = QTextEdit()

        self.form.addRow("Title*", self.title_edit)
        self.form.addRow("Customer", self.customer_edit)
        self.form.addRow("Due date", self.due_date)
        self.form.addRow("", self.no_due_cb)
        self.form.addRow("Priority", self.priority_cb)
        self.form.addRow("Category", self.category_cb)
        self.form.addRow("Status", self.status_cb)
        self.form.addRow("Pipeline", self.pipe_cb)
        self.form.addRow("Value", self.value_edit)
        self.form.addRow("Channel", self.channel_edit)
        self.form.addRow("Notes", self.notes_edit)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        self.form.addRow(self.buttons)

    def load_task(self, task: Task):
        self.title_edit.setText(task.title)
        self.customer_edit.setText(task.customer)
        if task.due:
            self.due_date.setDate(_to_qdate(task.due))
        else:
            self.due_date.setDate(QDate.currentDate())
            self.no_due_cb.setChecked(True)
        self.priority_cb.setCurrentText(task.priority.value)
        self.category_cb.setCurrentText(task.category.value)
        self.status_cb.setCurrentText(task.status.value)
        self.pipe_cb.setCurrentIndex(max(self.pipe_cb.findData(task.pipe.value if task.pipe else ""), 0))
        if task.value_eur is not None:
            self.value_edit.setText(format_value(task.value_eur))
        self.channel_edit.setText(task.channel)
        self.notes_edit.setPlainText(task.notes)

    def get_task_data(self):
        title = self.title_edit.text().strip()
        if not title:
            QMessageBox.warning(self, "Validation", "Title is required.")
            return None
        due = None
        if not self.no_due_cb.isChecked() and self.due_date.date().isValid():
            due = self.due_date.date().toPython()
        return {
            "title": title,
            "customer": self.customer_edit.text().strip(),
            "due": due,
            "priority": self.priority_cb.currentText(),
            "category": self.category_cb.currentText(),
            "status": self.status_cb.currentText(),
            "pipe": self.pipe_cb.currentData() or None,
            "value_eur": parse_value(self.value_edit.text().replace(",", ".")),
            "channel": self.channel_edit.text().strip(),
            "notes": self.notes_edit.toPlainText(),
        }


class PipelineColumn(QFrame):
    """One kanban column; the arrow buttons move the selected card one stage."""

    def __init__(self, stage: PipeStage, on_move, on_open, parent=None):
        super().__init__(parent)
        self.stage = stage
        self.setObjectName("column")
        self.setMinimumWidth(170)
        layout = QVBoxLayout(self)

        self.header = QLabel(stage.value)
        self.header.setFont(QFont("Segoe UI Semibold", 9))
        self.list = QListWidget()
        self.list.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list.setWordWrap(True)
        self.list.itemDoubleClicked.connect(lambda item: on_open(item.data(Qt.UserRole)))

        arrows = QHBoxLayout()
        back_btn = QPushButton("◀")
        back_btn.clicked.connect(lambda: self._move(on_move, -1))
        fwd_btn = QPushButton("▶")
        fwd_btn.clicked.connect(lambda: self._move(on_move, 1))
        arrows.addWidget(back_btn)
        arrows.addWidget(fwd_btn)

        layout.addWidget(self.header)
        layout.addWidget(self.list)
        layout.addLayout(arrows)

    def _move(self, on_move, direction: int):
        sel = self.list.selectedItems()
        if sel:
            on_move(sel[0].data(Qt.UserRole), direction)

    def populate(self, tasks):
        self.header.setText(f"{self.stage.value}  ({len(tasks)})")
        self.list.clear()
        if not tasks:
            empty = QListWidgetItem("No items")
            empty.setFlags(Qt.NoItemFlags)
            self.list.addItem(empty)
            return
        for t in tasks:
            lines = [t.title]
            sub = " • ".join(x for x in (t.customer, views.format_eur(t.value_eur)) if x)
            if sub:
                lines.append(sub)
            lines.append(f"Due: {t.due.strftime('%d/%m/%Y') if t.due else '-'}")
            item = QListWidgetItem("\n".join(lines))
            item.setData(Qt.UserRole, t.id)
            self.list.addItem(item)


class CalendarView(QWidget):
    def __init__(self, on_open, parent=None):
        super().__init__(parent)
        today = date.today()
        self.year, self.month = today.year, today.month
        self._tasks = []
        self.on_open = on_open

        layout = QVBoxLayout(self)
        nav = QHBoxLayout()
        prev_btn = QPushButton("◀")
        prev_btn.clicked.connect(lambda: self.shift_month(-1))
        next_btn = QPushButton("▶")
        next_btn.clicked.connect(lambda: self.shift_month(1))
        self.month_label = QLabel()
        self.month_label.setAlignment(Qt.AlignCenter)
        self.month_label.setFont(QFont("Segoe UI Semibold", 11))
        nav.addWidget(prev_btn)
        nav.addWidget(self.month_label, 1)
        nav.addWidget(next_btn)
        layout.addLayout(nav)

        self.grid = QGridLayout()
        self.grid.setSpacing(4)
        for col, name in enumerate(WEEKDAY_NAMES):
            lbl = QLabel(name)
            lbl.setAlignment(Qt.AlignCenter)
            self.grid.addWidget(lbl, 0, col)
        self.cells = []
        for i in range(42):
            cell = QListWidget()
            cell.setMinimumHeight(90)
            cell.itemDoubleClicked.connect(self._open_item)
            self.grid.addWidget(cell, 1 + i // 7, i % 7)
            self.cells.append(cell)
        layout.addLayout(self.grid)

    def _open_item(self, item: QListWidgetItem):
        task_id = item.data(Qt.UserRole)
        if task_id:
            self.on_open(task_id)

    def shift_month(self, delta: int):
        idx = self.year * 12 + (self.month - 1) + delta
        self.year, self.month = divmod(idx, 12)
        self.month += 1
        self.populate(self._tasks)

    def populate(self, tasks):
        self._tasks = list(tasks)
        self.month_label.setText(f"{MONTH_NAMES[self.month - 1]} {self.year}")
        by_day = views.tasks_by_day(self._tasks)
        for cell, day in zip(self.cells, views.month_grid(self.year, self.month)):
            cell.clear()
            in_month = day.month == self.month
            head = QListWidgetItem(str(day.day))
            head.setFlags(Qt.NoItemFlags)
            head.setForeground(QBrush(QColor("#0f1722" if in_month else "#9ca3af")))
            cell.addItem(head)
            items = by_day.get(day, [])
            for t in items[:CALENDAR_CHIPS]:
                label = t.title[:CHIP_TITLE_LEN] + ("…" if len(t.title) > CHIP_TITLE_LEN else "")
                chip = QListWidgetItem(label)
                chip.setToolTip(t.title)
                chip.setData(Qt.UserRole, t.id)
                cell.addItem(chip)
            if len(items) > CALENDAR_CHIPS:
                more = QListWidgetItem(f"+{len(items) - CALENDAR_CHIPS} more…")
                more.setFlags(Qt.NoItemFlags)
                cell.addItem(more)


class MainWindow(QMainWindow):
    def __init__(self, store: TaskStore, export_dir=None):
        super().__init__()
        self.setWindowTitle("Task Console")
        self.setFont(QFont("Segoe UI", 10))
        self.setStyleSheet(APP_STYLE)

        self.store = store
        self.export_dir = Path(export_dir or Path.home())
        self.selected_task_id = None
        self._setup_ui()
        self.store.subscribe(self.refresh)
        self.refresh()

    def _setup_ui(self):
        menubar = QMenuBar(self)
        file_menu = QMenu("&File", self)
        for label, slot in (
            ("Export JSON", self.on_export_json),
            ("Import JSON", self.on_import_json),
            ("Export CSV", self.on_export_csv),
            ("Import CSV", self.on_import_csv),
            ("Export Excel (.xlsx)", self.on_export_xlsx),
        ):
            act = QAction(label, self)
            act.triggered.connect(slot)
            file_menu.addAction(act)
        menubar.addMenu(file_menu)

        actions_menu = QMenu("&Actions", self)
        done_act = QAction("Mark all as done", self)
        done_act.triggered.connect(self.on_mark_all_done)
        spread_act = QAction("Spread tasks over this week", self)
        spread_act.triggered.connect(self.on_spread_week)
        actions_menu.addAction(done_act)
        actions_menu.addAction(spread_act)
        menubar.addMenu(actions_menu)

        help_menu = QMenu("&Help", self)
        about_act = QAction("About", self)
        about_act.triggered.connect(self.on_about)
        help_menu.addAction(about_act)
        menubar.addMenu(help_menu)
        self.setMenuBar(menubar)

        central = QWidget()
        v = QVBoxLayout(central)

        # KPI strip
        kpi_row = QHBoxLayout()
        self.kpi_labels = {}
        for key, caption in (
            ("total", "Total"),
            ("done", "Done"),
            ("overdue", "Overdue"),
            ("this_week", "This week"),
            ("pipeline_value", "Pipeline €"),
        ):
            box = QFrame()
            box.setObjectName("kpi")
            box_layout = QVBoxLayout(box)
            value = QLabel("0")
            value.setObjectName("kpiValue")
            value.setAlignment(Qt.AlignCenter)
            cap = QLabel(caption)
            cap.setAlignment(Qt.AlignCenter)
            box_layout.addWidget(value)
            box_layout.addWidget(cap)
            kpi_row.addWidget(box)
            self.kpi_labels[key] = value
        v.addLayout(kpi_row)

        # toolbar
        toolbar = QHBoxLayout()
        add_btn = QPushButton("+ Add Task")
        add_btn.setObjectName("addBtn")
        add_btn.clicked.connect(self.on_add_task)
        add_btn.setShortcut("Ctrl+N")
        toolbar.addWidget(add_btn)
        for name in QUICK_TEMPLATES:
            btn = QPushButton(f"+ {name}")
            btn.clicked.connect(partial(self.on_add_template, name))
            toolbar.addWidget(btn)
        toolbar.addStretch()

        self.period_filter = QComboBox()
        for label, key in PERIOD_CHOICES:
            self.period_filter.addItem(label, key)
        self.period_filter.currentIndexChanged.connect(self.refresh)
        self.sort_cb = QComboBox()
        for label, key in SORT_CHOICES:
            self.sort_cb.addItem(label, key)
        self.sort_cb.currentIndexChanged.connect(self.refresh)
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search…")
        self.search.textChanged.connect(self.refresh)

        toolbar.addWidget(QLabel("Show:"))
        toolbar.addWidget(self.period_filter)
        toolbar.addWidget(self.search)
        toolbar.addWidget(self.sort_cb)
        v.addLayout(toolbar)

        self.tabs = QTabWidget()

        # list tab: tasks on the left, details on the right
        splitter = QSplitter(Qt.Horizontal)
        self.task_list = QListWidget()
        self.task_list.setSelectionMode(QAbstractItemView.SingleSelection)
        self.task_list.itemSelectionChanged.connect(self.on_selection_changed)
        self.task_list.itemDoubleClicked.connect(lambda item: self.edit_task(item.data(Qt.UserRole)))
        splitter.addWidget(self.task_list)
        splitter.addWidget(self._build_details())
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        self.tabs.addTab(splitter, "List")

        board = QWidget()
        board_layout = QHBoxLayout(board)
        self.columns = {}
        for stage in PIPE_STAGES:
            col = PipelineColumn(stage, on_move=self.on_move_stage, on_open=self.edit_task)
            board_layout.addWidget(col)
            self.columns[stage] = col
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(board)
        self.tabs.addTab(scroll, "Pipeline")

        self.calendar = CalendarView(on_open=self.edit_task)
        self.tabs.addTab(self.calendar, "Calendar")

        v.addWidget(self.tabs)
        self.setCentralWidget(central)

        self.status = QStatusBar(self)
        self.setStatusBar(self.status)

        delete_shortcut = QAction(self)
        delete_shortcut.setShortcut("Delete")
        delete_shortcut.triggered.connect(self.on_delete_selected)
        self.addAction(delete_shortcut)

    def _build_details(self) -> QFrame:
        details = QFrame()
        details.setObjectName("details")
        details.setMinimumWidth(260)
        layout = QVBoxLayout(details)
        layout.setContentsMargins(8, 8, 8, 8)

        self.title_label = QLabel("Select a task to see details")
        self.title_label.setWordWrap(True)
        self.title_label.setFont(QFont("Segoe UI Semibold", 12))
        self.meta_label = QLabel("")
        self.meta_label.setWordWrap(True)
        self.notes_view = QTextEdit()
        self.notes_view.setReadOnly(True)
        self.notes_view.setFixedHeight(150)

        row1 = QHBoxLayout()
        edit_btn = QPushButton("Edit")
        edit_btn.clicked.connect(lambda: self.edit_task(self.selected_task_id))
        delete_btn = QPushButton("Delete")
        delete_btn.setObjectName("dangerBtn")
        delete_btn.clicked.connect(self.on_delete_selected)
        row1.addWidget(edit_btn)
        row1.addWidget(delete_btn)

        row2 = QHBoxLayout()
        mail_btn = QPushButton("Email reminder")
        mail_btn.clicked.connect(self.on_mail_reminder)
        ics_btn = QPushButton("Save .ics")
        ics_btn.clicked.connect(self.on_ics_reminder)
        row2.addWidget(mail_btn)
        row2.addWidget(ics_btn)

        layout.addWidget(self.title_label)
        layout.addWidget(self.meta_label)
        layout.addWidget(self.notes_view)
        layout.addLayout(row1)
        layout.addLayout(row2)
        layout.addStretch()
        return details

    # -- rendering --
    def refresh(self, *_):
        tasks = self.store.tasks
        today = date.today()
        shown = views.sort_tasks(
            views.filter_tasks(tasks, self.search.text(), self.period_filter.currentData(), today),
            self.sort_cb.currentData(),
        )

        self.task_list.blockSignals(True)
        self.task_list.clear()
        for t in shown:
            item = QListWidgetItem(self._row_text(t))
            item.setData(Qt.UserRole, t.id)
            item.setForeground(QBrush(QColor(PRIORITY_COLORS[t.priority]).darker(250)))
            if views.is_overdue(t, today):
                item.setBackground(QBrush(QColor("#ffe6e6")))
            self.task_list.addItem(item)
            if t.id == self.selected_task_id:
                item.setSelected(True)
        if not shown:
            empty = QListWidgetItem("No tasks for the selected filter.")
            empty.setFlags(Qt.NoItemFlags)
            self.task_list.addItem(empty)
        self.task_list.blockSignals(False)

        for stage, stage_tasks in views.group_by_stage(tasks).items():
            self.columns[stage].populate(stage_tasks)
        self.calendar.populate(tasks)

        k = views.compute_kpis(tasks, today)
        self.kpi_labels["total"].setText(str(k.total))
        self.kpi_labels["done"].setText(str(k.done))
        self.kpi_labels["overdue"].setText(str(k.overdue))
        self.kpi_labels["this_week"].setText(str(k.this_week))
        self.kpi_labels["pipeline_value"].setText(views.format_eur(k.pipeline_value))
        self.status.showMessage(f"{len(shown)} of {k.total} tasks shown")

        if self.selected_task_id and not self.store.get(self.selected_task_id):
            self._clear_details()
        elif self.selected_task_id:
            self._show_task_in_details(self.store.get(self.selected_task_id))

    def _row_text(self, t: Task) -> str:
        meta = [t.customer, t.category.value, t.channel]
        if t.pipe:
            meta.append(t.pipe.value)
        if t.value_eur is not None:
            meta.append(views.format_eur(t.value_eur))
        due = t.due.strftime("%d/%m/%Y") if t.due else "—"
        return f"{t.title}\n{' • '.join(m for m in meta if m)}\n{t.status.value} · {t.priority.value} · due {due}"

    def _show_task_in_details(self, t: Task):
        self.selected_task_id = t.id
        self.title_label.setText(t.title)
        parts = [
            f"<b>Customer:</b> {t.customer or '—'}",
            f"<b>Status:</b> {t.status.value}",
            f"<b>Priority:</b> {t.priority.value}",
            f"<b>Category:</b> {t.category.value}",
            f"<b>Channel:</b> {t.channel or '—'}",
            f"<b>Pipeline:</b> {t.pipe.value if t.pipe else '—'}",
            f"<b>Value:</b> {views.format_eur(t.value_eur) or '—'}",
        ]
        if t.due:
            due_str = t.due.strftime("%d/%m/%Y")
            if views.is_overdue(t, date.today()):
                due_str += "  (<b>OVERDUE</b>)"
            parts.append(f"<b>Due date:</b> {due_str}")
        else:
            parts.append("<b>Due date:</b> —")
        self.meta_label.setText("<br/>".join(parts))
        self.notes_view.setPlainText(t.notes)

    def _clear_details(self):
        self.selected_task_id = None
        self.title_label.setText("Select a task to see details")
        self.meta_label.setText("")
        self.notes_view.setPlainText("")

    def on_selection_changed(self):
        sel = self.task_list.selectedItems()
        task_id = sel[0].data(Qt.UserRole) if sel else None
        t = self.store.get(task_id) if task_id else None
        if t:
            self._show_task_in_details(t)
        else:
            self._clear_details()

    # -- task actions --
    def on_add_task(self):
        dlg = TaskDialog(self)
        if dlg.exec() == QDialog.Accepted:
            data = dlg.get_task_data()
            if not data:
                return
            t = self.store.add(data)
            self.status.showMessage(f"Added '{t.title}'")

    def on_add_template(self, name: str):
        t = self.store.add(QUICK_TEMPLATES[name])
        self.status.showMessage(f"Added '{t.title}'")

    def edit_task(self, task_id):
        if not task_id:
            QMessageBox.information(self, "Edit", "Select a task first")
            return
        t = self.store.get(task_id)
        if not t:
            return
        dlg = TaskDialog(self, task=t)
        if dlg.exec() == QDialog.Accepted:
            data = dlg.get_task_data()
            if not data:
                return
            self.store.update(task_id, data)

    def on_delete_selected(self):
        if not self.selected_task_id:
            QMessageBox.information(self, "Delete", "Select a task first")
            return
        t = self.store.get(self.selected_task_id)
        if not t:
            return
        ok = QMessageBox.question(self, "Delete", f"Delete task '{t.title}'?")
        if ok == QMessageBox.StandardButton.Yes:
            self.store.remove(t.id)
            self._clear_details()

    def on_move_stage(self, task_id: str, direction: int):
        self.store.move_stage(task_id, direction)

    def on_mark_all_done(self):
        ok = QMessageBox.question(self, "Mark all as done", "Mark every task as done?")
        if ok == QMessageBox.StandardButton.Yes:
            self.store.mark_all_done()

    def on_spread_week(self):
        self.store.spread_over_week()

    def on_mail_reminder(self):
        t = self.store.get(self.selected_task_id) if self.selected_task_id else None
        if not t:
            QMessageBox.information(self, "Email reminder", "Select a task first")
            return
        QDesktopServices.openUrl(QUrl(mailto_link(t)))

    def on_ics_reminder(self):
        t = self.store.get(self.selected_task_id) if self.selected_task_id else None
        if not t:
            QMessageBox.information(self, "Calendar reminder", "Select a task first")
            return
        directory = QFileDialog.getExistingDirectory(self, "Save .ics to", str(self.export_dir))
        if not directory:
            return
        try:
            path = export_service.export_task_to_ics(t, directory)
        except OSError as e:
            logger.exception("ics export failed")
            QMessageBox.warning(self, "Calendar reminder", f"Could not write file: {e}")
            return
        self.status.showMessage(f"Saved {path}")

    # -- export / import --
    def _save_path(self, caption: str, filename: str, pattern: str):
        path, _ = QFileDialog.getSaveFileName(self, caption, str(self.export_dir / filename), pattern)
        return path

    def _export(self, caption: str, writer, path: str):
        tasks = self.store.tasks
        try:
            writer(tasks, path)
        except OSError as e:
            logger.exception("%s failed", caption)
            QMessageBox.warning(self, caption, f"Could not write file: {e}")
            return
        QMessageBox.information(self, caption, f"Exported {len(tasks)} tasks to {path}")

    def on_export_json(self):
        path = self._save_path("Export JSON", "tasks.json", "JSON Files (*.json)")
        if path:
            self._export("Export JSON", export_service.export_tasks_to_json, path)

    def on_export_csv(self):
        path = self._save_path("Export CSV", "tasks.csv", "CSV Files (*.csv)")
        if path:
            self._export("Export CSV", export_service.export_tasks_to_csv, path)

    def on_export_xlsx(self):
        path = self._save_path("Export Excel", "tasks.xlsx", "Excel Files (*.xlsx)")
        if path:
            self._export("Export Excel", export_service.export_tasks_to_excel, path)

    def _import(self, caption: str, reader, pattern: str):
        path, _ = QFileDialog.getOpenFileName(self, caption, str(self.export_dir), pattern)
        if not path:
            return
        try:
            imported = reader(path)
        except export_service.ImportFormatError as e:
            logger.warning("%s rejected %s: %s", caption, path, e)
            QMessageBox.warning(self, caption, f"Import error: {e}")
            return
        except (OSError, UnicodeDecodeError) as e:
            logger.exception("%s could not read %s", caption, path)
            QMessageBox.warning(self, caption, f"Could not read file: {e}")
            return
        self.store.replace_all(imported)
        QMessageBox.information(self, caption, f"Imported {len(imported)} tasks from {path}")

    def on_import_json(self):
        self._import("Import JSON", export_service.import_tasks_from_json, "JSON Files (*.json)")

    def on_import_csv(self):
        self._import("Import CSV", export_service.import_tasks_from_csv, "CSV Files (*.csv)")

    def on_about(self):
        QMessageBox.information(
            self,
            "About",
            "Task Console\nDaily tasks, sales pipeline and calendar in one window.\n\n"
            "Data is stored locally. CSV exports open in Excel; use 'Save .ics' to add a reminder to your calendar.",
        )
