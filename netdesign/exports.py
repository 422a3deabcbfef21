"""Diagram, IP table and report exports."""

import csv
import io
import logging
import time
import xml.etree.ElementTree as ET
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
from matplotlib.figure import Figure
import networkx as nx
from bs4 import BeautifulSoup
from docx import Document
from docx.shared import Pt
from openpyxl import Workbook
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .errors import ExportError
from .layout import hierarchical_layout, layout_bounds, to_networkx
from .topology import NetworkGraph

logger = logging.getLogger(__name__)

DIAGRAM_MARGIN = 100
MIN_DIAGRAM_PX = 400
MAX_DIAGRAM_PX = 8000
DPI = 100

KIND_COLORS = {
    "internet": "#90caf9",
    "router": "#1976d2",
    "firewall": "#d32f2f",
    "coreSwitch": "#388e3c",
    "department": "#ffb300",
    "server": "#5e35b1",
    "printer": "#6d4c41",
    "user": "#78909c",
    "wirelessController": "#00897b",
    "accessPoint": "#4db6ac",
    "vpnConcentrator": "#c2185b",
    "remoteUsers": "#f06292",
}

DIAGRAM_FORMATS = {
    "png": ("image/png", "network_diagram.png"),
    "pdf": ("application/pdf", "network_diagram.pdf"),
    "drawio": ("application/xml", "network_diagram.drawio"),
}

IP_TABLE_FORMATS = {
    "csv": ("text/csv; charset=utf-8", "ip_allocation.csv"),
    "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "ip_allocation.xlsx"),
}

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


########################
# DIAGRAM EXPORTS
########################

def _canvas_size(positions) -> Tuple[int, int]:
    min_x, min_y, max_x, max_y = layout_bounds(positions)
    width = int(max_x - min_x) + 2 * DIAGRAM_MARGIN
    height = int(max_y - min_y) + 2 * DIAGRAM_MARGIN
    clamp = lambda v: min(max(v, MIN_DIAGRAM_PX), MAX_DIAGRAM_PX)
    return clamp(width), clamp(height)


def render_diagram_png(graph: NetworkGraph, positions: Optional[Dict] = None) -> Tuple[bytes, Tuple[int, int]]:
    """Rasterise the laid-out graph. Returns PNG bytes and (width, height) in pixels."""
    positions = positions or hierarchical_layout(graph)
    width, height = _canvas_size(positions)
    min_x, min_y, max_x, max_y = layout_bounds(positions)

    g = to_networkx(graph)
    solid = [(e.source, e.target) for e in graph.edges if not e.dashed]
    dashed = [(e.source, e.target) for e in graph.edges if e.dashed]

    # pyplot keeps process-global state; each request gets its own Figure
    fig = Figure(figsize=(width / DPI, height / DPI), dpi=DPI, facecolor="white")
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(min_x - DIAGRAM_MARGIN, max_x + DIAGRAM_MARGIN)
    # y grows downwards in the layout
    ax.set_ylim(max_y + DIAGRAM_MARGIN, min_y - DIAGRAM_MARGIN)
    ax.axis("off")

    nx.draw_networkx_edges(g, positions, edgelist=solid, ax=ax, width=2, edge_color="#6c757d",
                           arrows=True, arrowstyle="-|>", node_size=600)
    if dashed:
        nx.draw_networkx_edges(g, positions, edgelist=dashed, ax=ax, width=2, edge_color="#6c757d",
                               style="dashed", arrows=True, arrowstyle="-|>", node_size=600)
    nx.draw_networkx_nodes(
        g, positions, nodelist=[n.id for n in graph.nodes], ax=ax, node_size=600,
        node_color=[KIND_COLORS.get(n.kind, "#bdbdbd") for n in graph.nodes],
        edgecolors="black", linewidths=1.5,
    )
    label_pos = {node_id: (x, y + 35) for node_id, (x, y) in positions.items()}
    nx.draw_networkx_labels(g, label_pos, labels={n.id: n.label for n in graph.nodes},
                            ax=ax, font_size=8, verticalalignment="top")

    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=DPI, facecolor="white")

    logger.info(f"Rendered diagram PNG {width}x{height} ({len(graph.nodes)} nodes)")
    return buf.getvalue(), (width, height)


def render_diagram_pdf(graph: NetworkGraph, positions: Optional[Dict] = None) -> bytes:
    """Single-page PDF sized to the diagram's pixel bounds, wrapping the PNG."""
    png, (width, height) = render_diagram_png(graph, positions)
    buf = BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(width, height))
    pdf.setTitle("Network Diagram")
    pdf.drawImage(ImageReader(BytesIO(png)), 0, 0, width=width, height=height)
    pdf.showPage()
    pdf.save()
    return buf.getvalue()


def generate_drawio_xml(graph: NetworkGraph, positions: Optional[Dict] = None) -> str:
    """Minimal draw.io document: one vertex per node, one connector per edge."""
    positions = positions or hierarchical_layout(graph)
    # Connectors reference vertices through this map, never through list lookups
    cell_index = {node.id: index for index, node in enumerate(graph.nodes)}

    mxfile = ET.Element("mxfile", attrib={
        "host": "app.diagrams.net",
        "modified": "2023-06-03T12:00:00.000Z",
        "version": "14.7.4",
        "type": "device",
    })
    diagram = ET.SubElement(mxfile, "diagram", attrib={"id": "network-diagram", "name": "Network Diagram"})
    model = ET.SubElement(diagram, "mxGraphModel", attrib={
        "dx": "1422", "dy": "794", "grid": "1", "gridSize": "10", "guides": "1",
        "tooltips": "1", "connect": "1", "arrows": "1", "fold": "1", "page": "1",
        "pageScale": "1", "pageWidth": "827", "pageHeight": "1169", "math": "0", "shadow": "0",
    })
    root = ET.SubElement(model, "root")
    ET.SubElement(root, "mxCell", attrib={"id": "0"})
    ET.SubElement(root, "mxCell", attrib={"id": "1", "parent": "0"})

    for index, node in enumerate(graph.nodes):
        x, y = positions[node.id]
        cell = ET.SubElement(root, "mxCell", attrib={
            "id": f"node{index}",
            "value": node.label,
            "style": (f"shape=image;image={node.image};verticalLabelPosition=bottom;"
                      "verticalAlign=top;rounded=1;whiteSpace=wrap;html=1;"),
            "vertex": "1",
            "parent": "1",
        })
        ET.SubElement(cell, "mxGeometry", attrib={
            "x": str(round(x)), "y": str(round(y)), "width": "80", "height": "80", "as": "geometry",
        })

    for index, edge in enumerate(graph.edges):
        style = "endArrow=classic;html=1;"
        if edge.dashed:
            style += "dashed=1;"
        cell = ET.SubElement(root, "mxCell", attrib={
            "id": f"edge{index}",
            "value": "",
            "style": style,
            "edge": "1",
            "parent": "1",
            "source": f"node{cell_index[edge.source]}",
            "target": f"node{cell_index[edge.target]}",
        })
        geometry = ET.SubElement(cell, "mxGeometry", attrib={
            "width": "50", "height": "50", "relative": "1", "as": "geometry",
        })
        ET.SubElement(geometry, "mxPoint", attrib={"x": "400", "y": "400", "as": "sourcePoint"})
        ET.SubElement(geometry, "mxPoint", attrib={"x": "450", "y": "350", "as": "targetPoint"})

    ET.indent(mxfile, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(mxfile, encoding="unicode")


def export_diagram(graph: NetworkGraph, fmt: str) -> bytes:
    if fmt not in DIAGRAM_FORMATS:
        raise ExportError(f"Unsupported diagram format: {fmt}")
    # Layout is computed once, synchronously, before any rendering
    positions = hierarchical_layout(graph)
    if fmt == "png":
        return render_diagram_png(graph, positions)[0]
    if fmt == "pdf":
        return render_diagram_pdf(graph, positions)
    return generate_drawio_xml(graph, positions).encode("utf-8")


########################
# IP TABLE EXPORTS
########################

def parse_ip_allocation(fragment: str) -> List[Dict[str, str]]:
    """Re-extract (Device, IP) records from the IP-allocation HTML fragment.

    Headings are dropped, the remaining text is split per line and each line
    on the last ": ", since addresses never contain one. Lines without an
    address are skipped.
    """
    soup = BeautifulSoup(fragment or "", "html.parser")
    for heading in soup.find_all(["h1", "h2", "h3", "h4"]):
        heading.decompose()

    records = []
    for line in soup.get_text().split("\n"):
        line = line.strip()
        if not line:
            continue
        device, sep, ip = line.rpartition(": ")
        if not sep or not ip.strip():
            continue
        records.append({"Device": device.strip(), "IP": ip.strip()})
    return records


def ip_table_csv(records: List[Dict[str, str]]) -> str:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=["Device", "IP"], lineterminator="\n")
    writer.writeheader()
    writer.writerows(records)
    return out.getvalue()


def ip_table_xlsx(records: List[Dict[str, str]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "IP Allocation"
    ws.append(["Device", "IP"])
    for record in records:
        ws.append([record["Device"], record["IP"]])
    ws.column_dimensions["A"].width = 32
    ws.column_dimensions["B"].width = 28
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_ip_table(fragment: str, fmt: str) -> bytes:
    if fmt not in IP_TABLE_FORMATS:
        raise ExportError(f"Unsupported IP table format: {fmt}")
    records = parse_ip_allocation(fragment)
    logger.info(f"Exporting {len(records)} IP records as {fmt}")
    if fmt == "csv":
        return ip_table_csv(records).encode("utf-8")
    return ip_table_xlsx(records)


########################
# WORD REPORT
########################

def _add_fragment(doc, fragment: str):
    """Append one HTML report fragment to the document."""
    soup = BeautifulSoup(fragment or "", "html.parser")
    for el in soup.find_all(["h3", "li", "p"]):
        text = el.get_text(strip=True)
        if not text:
            continue
        if el.name == "h3":
            doc.add_heading(text.rstrip(":"), level=2)
        elif el.name == "li":
            para = doc.add_paragraph(style="List Bullet")
            label, sep, rest = text.rpartition(": ")
            if sep:
                run = para.add_run(f"{label}: ")
                run.bold = True
                para.add_run(rest)
            else:
                para.add_run(text)
            para.paragraph_format.space_after = Pt(6)
        else:
            para = doc.add_paragraph()
            run = para.add_run(text)
            run.bold = el.find("strong") is not None


def design_report_docx(design, departments: Optional[List[dict]] = None) -> bytes:
    doc = Document()
    doc.add_heading("Network Design Report", level=1)
    doc.add_paragraph(f"Generated: {time.strftime('%Y-%m-%d %H:%M:%S')}")

    if departments:
        doc.add_heading("Departments", level=2)
        table = doc.add_table(rows=1, cols=4)
        table.style = "Table Grid"
        for cell, title in zip(table.rows[0].cells, ("Department", "Users", "Servers", "Printers")):
            cell.text = title
        for dept in departments:
            row = table.add_row().cells
            row[0].text = dept["name"]
            row[1].text = str(dept["users"])
            row[2].text = str(dept["servers"])
            row[3].text = str(dept["printers"])

    for fragment in (design.ip_allocation, design.recommendations, design.cost_estimate):
        _add_fragment(doc, fragment)

    buf = BytesIO()
    doc.save(buf)
    logger.info("Design report generated successfully")
    return buf.getvalue()
