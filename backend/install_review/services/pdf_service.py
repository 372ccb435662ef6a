"""
Resolution PDF layout.
Renders a decision snapshot to PDF bytes; knows nothing about the database.
"""
import io
import logging
from dataclasses import dataclass, field

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from PIL import Image

from install_review.config import settings
from install_review.models.application import APPROVED, REJECTED
from install_review.utils.filesystem import file_extension

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg"}

PRIMARY = (0, 92, 189)
PRIMARY_SOFT = (217, 235, 250)
SUCCESS = (0, 140, 46)
DANGER = (179, 0, 0)
TEXT = (0, 0, 0)
MUTED = (107, 107, 107)
LINE = (217, 217, 217)
ZEBRA = (242, 242, 242)
WHITE = (255, 255, 255)
WATERMARK = (217, 26, 26)

# Dimensions in millimetres on an A4 page.
MARGIN = 18
HEADER_BAND_HEIGHT = 20
BOX_PADDING = 4
LINE_HEIGHT = 5.5
GALLERY_COLUMNS = 2
GALLERY_GAP_X = 5
GALLERY_GAP_Y = 7
MAX_IMAGE_HEIGHT = 65
CAPTION_HEIGHT = 7
TABLE_ROW_HEIGHT = 7
KIND_COLUMN_SHARE = 0.35
PX_TO_MM = 25.4 / 72


@dataclass
class ResolutionAttachment:
    kind: str
    file_name: str
    data: bytes | None = None


@dataclass
class ResolutionSnapshot:
    application_id: int
    decision: str
    generated_at: str
    applicant_lines: list[str]
    comment: str | None = None
    reason: str | None = None
    attachments: list[ResolutionAttachment] = field(default_factory=list)


def _latin1(text: str) -> str:
    """Encode to latin-1, replacing unsupported chars; fpdf built-in fonts are latin-1 only."""
    return str(text).encode("latin-1", errors="replace").decode("latin-1")


def is_image(file_name: str | None) -> bool:
    return file_extension(file_name) in IMAGE_EXTENSIONS


def _tint(color: tuple[int, int, int], strength: float) -> tuple[int, ...]:
    return tuple(round(255 - (255 - c) * strength) for c in color)


class ResolutionPDF(FPDF):
    def __init__(self, decision: str):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.decision = decision
        self.set_margins(MARGIN, MARGIN, MARGIN)
        self.set_auto_page_break(True, margin=MARGIN + 6)

    def header(self):
        if self.decision == REJECTED:
            self._draw_watermark("REJECTED")

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(*MUTED)
        self.cell(0, 5, f"Page {self.page_no()} of {{nb}}", align="R")

    def _draw_watermark(self, text: str):
        with self.local_context(fill_opacity=0.08):
            self.set_font("Helvetica", "B", 80)
            self.set_text_color(*WATERMARK)
            width = self.get_string_width(text)
            cx, cy = self.w / 2, self.h / 2
            with self.rotation(30, x=cx, y=cy):
                self.text(cx - width / 2, cy + 10, text)

    def ensure_space(self, needed: float):
        if self.get_y() + needed > self.page_break_trigger:
            self.add_page()


def _truncate(pdf: FPDF, text: str, max_width: float) -> str:
    if pdf.get_string_width(text) <= max_width:
        return text
    while text and pdf.get_string_width(text + "...") > max_width:
        text = text[:-1]
    return text + "..."


def _draw_header(pdf: ResolutionPDF, snapshot: ResolutionSnapshot, brand_name: str):
    pdf.set_fill_color(*PRIMARY)
    pdf.rect(0, 0, pdf.w, HEADER_BAND_HEIGHT, style="F")

    pdf.set_xy(MARGIN, 6)
    pdf.set_font("Helvetica", "B", 13)
    pdf.set_text_color(*WHITE)
    pdf.cell(0, 8, _latin1(brand_name))

    pdf.set_xy(MARGIN, HEADER_BAND_HEIGHT + 6)
    pdf.set_font("Helvetica", "B", 18)
    pdf.set_text_color(*TEXT)
    pdf.cell(0, 9, _latin1(f"Resolution No. {snapshot.application_id}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(*MUTED)
    pdf.cell(0, 6, _latin1(f"Generated: {snapshot.generated_at}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)


def _draw_badge(pdf: ResolutionPDF, decision: str):
    color = SUCCESS if decision == APPROVED else DANGER
    label = f"Status: {decision}"
    height = 8

    pdf.set_font("Helvetica", "B", 11)
    width = pdf.get_string_width(label) + 10
    x, y = pdf.l_margin, pdf.get_y()

    pdf.set_fill_color(*_tint(color, 0.15))
    pdf.set_draw_color(*color)
    pdf.set_text_color(*color)
    pdf.cell(width, height, label, border=1, fill=True, align="C")
    pdf.set_xy(x, y + height + 5)


def _draw_section_box(pdf: ResolutionPDF, title: str, lines: list[str]):
    box_height = BOX_PADDING * 2 + 7 + len(lines) * LINE_HEIGHT
    pdf.ensure_space(box_height)
    x, y = pdf.l_margin, pdf.get_y()
    inner_width = pdf.epw - BOX_PADDING * 2

    pdf.set_draw_color(*LINE)
    pdf.rect(x, y, pdf.epw, box_height, style="D")

    pdf.set_xy(x + BOX_PADDING, y + BOX_PADDING)
    pdf.set_font("Helvetica", "B", 11)
    pdf.set_text_color(*PRIMARY)
    pdf.cell(inner_width, 7, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(*TEXT)
    for line in lines:
        pdf.set_x(x + BOX_PADDING)
        pdf.cell(inner_width, LINE_HEIGHT, _truncate(pdf, _latin1(line), inner_width),
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_xy(x, y + box_height + 5)


def _draw_text_block(pdf: ResolutionPDF, label: str, text: str):
    body = _latin1(text)
    pdf.set_font("Helvetica", "", 10)
    lines = pdf.multi_cell(pdf.epw, LINE_HEIGHT, body, dry_run=True, output="LINES")
    pdf.ensure_space(8 + LINE_HEIGHT * min(len(lines), 3))

    pdf.set_fill_color(*PRIMARY_SOFT)
    pdf.set_font("Helvetica", "B", 11)
    pdf.set_text_color(*PRIMARY)
    pdf.cell(pdf.epw, 8, _latin1(f"{label}:"), fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(*TEXT)
    pdf.multi_cell(pdf.epw, LINE_HEIGHT, body, fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(pdf.epw, 2, "", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(5)


def _load_image(attachment: ResolutionAttachment) -> Image.Image | None:
    if not attachment.data:
        return None
    try:
        image = Image.open(io.BytesIO(attachment.data))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.debug("Skipping unreadable image %s: %s", attachment.file_name, exc)
        return None
    if not image.width or not image.height:
        return None
    if image.mode not in ("RGB", "RGBA", "L"):
        image = image.convert("RGB")
    return image


def _draw_gallery(pdf: ResolutionPDF, attachments: list[ResolutionAttachment]):
    loaded = []
    for attachment in attachments:
        if not is_image(attachment.file_name):
            continue
        image = _load_image(attachment)
        if image is not None:
            loaded.append((attachment, image))
    if not loaded:
        return

    col_width = (pdf.epw - GALLERY_GAP_X * (GALLERY_COLUMNS - 1)) / GALLERY_COLUMNS

    pdf.ensure_space(8 + MAX_IMAGE_HEIGHT + CAPTION_HEIGHT)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(*PRIMARY)
    pdf.cell(0, 8, "Attached images", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 8)
    pdf.set_text_color(*MUTED)

    y = pdf.get_y()
    column = 0
    row_height = 0.0
    for attachment, image in loaded:
        # Fit the column width, never exceed the height cap, never upscale.
        scale = min(col_width / image.width, MAX_IMAGE_HEIGHT / image.height, PX_TO_MM)
        width, height = image.width * scale, image.height * scale
        needed = height + CAPTION_HEIGHT

        if y + needed > pdf.page_break_trigger:
            pdf.add_page()
            pdf.set_font("Helvetica", "", 8)
            pdf.set_text_color(*MUTED)
            y = pdf.get_y()
            column = 0
            row_height = 0.0

        x = pdf.l_margin + column * (col_width + GALLERY_GAP_X)
        pdf.image(image, x=x, y=y, w=width, h=height)

        caption = (attachment.kind or "").strip() or attachment.file_name or "-"
        pdf.set_xy(x, y + height + 1.5)
        pdf.cell(col_width, 4.5, _truncate(pdf, _latin1(caption), col_width))

        row_height = max(row_height, needed)
        column += 1
        if column == GALLERY_COLUMNS:
            y += row_height + GALLERY_GAP_Y
            column = 0
            row_height = 0.0

    if column:
        y += row_height + GALLERY_GAP_Y
    pdf.set_xy(pdf.l_margin, y)


def _draw_table_header(pdf: ResolutionPDF, kind_width: float, name_width: float):
    pdf.set_font("Helvetica", "B", 10)
    pdf.set_text_color(*TEXT)
    pdf.set_fill_color(*PRIMARY_SOFT)
    pdf.set_draw_color(*LINE)
    pdf.cell(kind_width, TABLE_ROW_HEIGHT, "Kind", border=1, fill=True)
    pdf.cell(name_width, TABLE_ROW_HEIGHT, "File name", border=1, fill=True,
             new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 10)


def _draw_documents_table(pdf: ResolutionPDF, rows: list[tuple[str, str]]):
    kind_width = pdf.epw * KIND_COLUMN_SHARE
    name_width = pdf.epw - kind_width

    pdf.ensure_space(8 + TABLE_ROW_HEIGHT * 2)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(*PRIMARY)
    pdf.cell(0, 8, "Documents", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    _draw_table_header(pdf, kind_width, name_width)

    shaded = False
    for kind, name in rows:
        if pdf.get_y() + TABLE_ROW_HEIGHT > pdf.page_break_trigger:
            pdf.add_page()
            _draw_table_header(pdf, kind_width, name_width)
        pdf.set_fill_color(*(ZEBRA if shaded else WHITE))
        pdf.cell(kind_width, TABLE_ROW_HEIGHT, _truncate(pdf, _latin1(kind), kind_width - 2),
                 border=1, fill=True)
        pdf.cell(name_width, TABLE_ROW_HEIGHT, _truncate(pdf, _latin1(name), name_width - 2),
                 border=1, fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        shaded = not shaded


def render_resolution_pdf(snapshot: ResolutionSnapshot, brand_name: str | None = None) -> bytes:
    """Render the resolution for one decision and return the PDF bytes."""
    pdf = ResolutionPDF(snapshot.decision)
    pdf.add_page()

    _draw_header(pdf, snapshot, brand_name or settings.brand_name)
    _draw_badge(pdf, snapshot.decision)
    _draw_section_box(pdf, "Applicant data", snapshot.applicant_lines)

    if snapshot.reason:
        _draw_text_block(pdf, "Reason", snapshot.reason)
    if snapshot.comment:
        _draw_text_block(pdf, "Comment", snapshot.comment)

    _draw_gallery(pdf, snapshot.attachments)

    remaining = [
        (a.kind or "-", a.file_name or "-")
        for a in snapshot.attachments
        if not is_image(a.file_name)
    ]
    if remaining:
        _draw_documents_table(pdf, remaining)

    return bytes(pdf.output())
