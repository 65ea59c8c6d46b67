"""
PDF Generation Service.
Creates quotation PDFs using ReportLab.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.lib.enums import TA_RIGHT

from app.core.config import settings
from app.models.quote import Quote, QuoteStatus, PdfPriceType


STATUS_LABELS = {
    QuoteStatus.PENDING: "En attente",
    QuoteStatus.PENDING_APPROVAL: "En attente d'approbation",
    QuoteStatus.EFFECTIVE: "Effectif",
    QuoteStatus.REJECTED: "Refusé",
}


class PDFService:
    """Service for generating quotation PDFs."""

    def __init__(self, storage_path: str | None = None):
        self.storage_path = Path(storage_path or settings.PDF_STORAGE_PATH)
        self.storage_path.mkdir(parents=True, exist_ok=True)

        # Colors
        self.primary_color = colors.HexColor("#059669")  # Green
        self.secondary_color = colors.HexColor("#065F46")  # Dark green
        self.gray_color = colors.HexColor("#6B7280")
        self.light_gray = colors.HexColor("#F3F4F6")
        self.border_color = colors.HexColor("#E5E7EB")

    def _get_styles(self):
        """Get custom paragraph styles."""
        styles = getSampleStyleSheet()

        styles.add(ParagraphStyle(
            name='QuoteTitle',
            parent=styles['Heading1'],
            fontSize=24,
            textColor=self.primary_color,
            spaceAfter=6*mm,
        ))
        styles.add(ParagraphStyle(
            name='Subtitle',
            parent=styles['Normal'],
            fontSize=10,
            textColor=self.gray_color,
        ))
        styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=styles['Heading2'],
            fontSize=12,
            textColor=self.secondary_color,
            spaceBefore=4*mm,
            spaceAfter=2*mm,
        ))
        styles.add(ParagraphStyle(
            name='NormalText',
            parent=styles['Normal'],
            fontSize=10,
            textColor=colors.black,
        ))
        styles.add(ParagraphStyle(
            name='SmallText',
            parent=styles['Normal'],
            fontSize=8,
            textColor=self.gray_color,
        ))
        styles.add(ParagraphStyle(
            name='RightAlign',
            parent=styles['Normal'],
            fontSize=10,
            alignment=TA_RIGHT,
        ))
        styles.add(ParagraphStyle(
            name='Bold',
            parent=styles['Normal'],
            fontSize=10,
            fontName='Helvetica-Bold',
        ))

        return styles

    def _format_currency(self, amount: Decimal) -> str:
        """Format amount as currency."""
        return f"{settings.CURRENCY_SYMBOL} {Decimal(amount):,.2f}"

    def _format_date(self, d) -> str:
        """Format date in French format."""
        months = [
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre"
        ]
        return f"{d.day} {months[d.month - 1]} {d.year}"

    def _client_lines(self, quote: Quote) -> list[str]:
        """Client block, filtered by the quotation's inclusion flags."""
        client = quote.client
        lines = []
        if quote.include_company_name:
            lines.append(f"<b>{client.company_name}</b>")
        if quote.include_contact_name:
            lines.append(f"À l'attention de: {client.contact_name}")
        if quote.include_tax_document and client.tax_document:
            lines.append(f"Document fiscal: {client.tax_document}")
        if quote.include_company_phone and client.company_phone:
            lines.append(f"Tél: {client.company_phone}")
        if quote.include_company_email and client.company_email:
            lines.append(f"Email: {client.company_email}")
        return lines

    def _line_price(self, quote: Quote, item) -> tuple[Decimal, Decimal]:
        """(unit price, line total) as shown on the document."""
        if quote.pdf_price_type == PdfPriceType.MINIMUM and item.service is not None:
            unit_price = Decimal(item.service.minimum_price)
            return unit_price, unit_price * item.quantity * item.duration_months
        return Decimal(item.unit_price), Decimal(item.subtotal)

    async def generate_quote_pdf(self, quote: Quote) -> str:
        """
        Generate PDF for a quotation.

        Expects items (with service, category, unit), client and owner loaded.

        Returns:
            Path to generated PDF file
        """
        styles = self._get_styles()

        filename = f"cotizacion_{quote.quote_number.replace('/', '-')}.pdf"
        filepath = self.storage_path / filename

        doc = SimpleDocTemplate(
            str(filepath),
            pagesize=A4,
            rightMargin=20*mm,
            leftMargin=20*mm,
            topMargin=20*mm,
            bottomMargin=20*mm,
        )

        elements = []

        # ===== HEADER =====
        created = quote.created_at or datetime.now()
        header_data = [
            [
                Paragraph(f"<b>{settings.COMPANY_NAME}</b>", styles['Bold']),
                Paragraph("<b>DEVIS</b>", styles['QuoteTitle']),
            ],
            [
                Paragraph(settings.COMPANY_ADDRESS or "", styles['SmallText']),
                Paragraph(f"N° {quote.quote_number}", styles['Subtitle']),
            ],
            [
                Paragraph(f"Tél: {settings.COMPANY_PHONE or 'N/A'}", styles['SmallText']),
                Paragraph(f"Date: {self._format_date(created)}", styles['SmallText']),
            ],
            [
                Paragraph(f"Email: {settings.COMPANY_EMAIL or 'N/A'}", styles['SmallText']),
                Paragraph(f"Statut: {STATUS_LABELS.get(quote.status, quote.status)}", styles['SmallText']),
            ],
        ]

        header_table = Table(header_data, colWidths=[95*mm, 75*mm])
        header_table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ]))
        elements.append(header_table)
        elements.append(Spacer(1, 10*mm))

        # ===== CLIENT INFO =====
        client_lines = self._client_lines(quote)
        if client_lines:
            elements.append(Paragraph("DESTINATAIRE", styles['SectionHeader']))
            elements.append(Paragraph("<br/>".join(client_lines), styles['NormalText']))
            elements.append(Spacer(1, 8*mm))

        # ===== ITEMS TABLE =====
        elements.append(Paragraph("DÉTAIL DES SERVICES", styles['SectionHeader']))

        items_data = [
            [
                Paragraph("<b>Service</b>", styles['Bold']),
                Paragraph("<b>Catégorie</b>", styles['Bold']),
                Paragraph("<b>Qté</b>", styles['Bold']),
                Paragraph("<b>Prix mensuel</b>", styles['Bold']),
                Paragraph("<b>Mois</b>", styles['Bold']),
                Paragraph("<b>Sous-total</b>", styles['Bold']),
            ]
        ]

        for item in quote.items:
            unit_price, line_total = self._line_price(quote, item)
            unit_label = item.unit_of_measure.abbreviation if item.unit_of_measure else ""
            items_data.append([
                Paragraph(item.service.name if item.service else str(item.service_id), styles['NormalText']),
                Paragraph(item.category.name if item.category else "", styles['NormalText']),
                Paragraph(f"{item.quantity} {unit_label}", styles['NormalText']),
                Paragraph(self._format_currency(unit_price), styles['RightAlign']),
                Paragraph(str(item.duration_months), styles['RightAlign']),
                Paragraph(self._format_currency(line_total), styles['RightAlign']),
            ])

        items_table = Table(
            items_data,
            colWidths=[45*mm, 30*mm, 20*mm, 27*mm, 15*mm, 33*mm],
            repeatRows=1,
        )
        items_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.primary_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 4*mm),
            ('TOPPADDING', (0, 0), (-1, 0), 4*mm),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('BOTTOMPADDING', (0, 1), (-1, -1), 3*mm),
            ('TOPPADDING', (0, 1), (-1, -1), 3*mm),
            ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LINEBELOW', (0, 0), (-1, 0), 1, self.primary_color),
            ('LINEBELOW', (0, 1), (-1, -2), 0.5, self.border_color),
            ('LINEBELOW', (0, -1), (-1, -1), 1, self.border_color),
            *[('BACKGROUND', (0, i), (-1, i), self.light_gray)
              for i in range(2, len(items_data), 2)],
        ]))

        elements.append(items_table)
        elements.append(Spacer(1, 6*mm))

        # ===== TOTALS =====
        totals_data = []
        if quote.original_total is not None:
            totals_data.append(["Total original", self._format_currency(quote.original_total)])
        if quote.has_free_months and quote.free_months:
            totals_data.append([
                "Mois gratuits",
                f"{quote.free_months} / {quote.contract_months}",
            ])
        if quote.has_discount and quote.discount_percentage:
            totals_data.append(["Remise", f"{quote.discount_percentage} %"])
        totals_data.append([
            f"Total ({quote.contract_months} mois)",
            self._format_currency(quote.total),
        ])

        totals_table = Table(totals_data, colWidths=[130*mm, 40*mm])
        totals_table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('TOPPADDING', (0, 0), (-1, -1), 2*mm),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2*mm),
            ('LINEABOVE', (0, -1), (-1, -1), 1, self.primary_color),
            ('BACKGROUND', (0, -1), (-1, -1), self.light_gray),
        ]))

        elements.append(totals_table)
        elements.append(Spacer(1, 10*mm))

        # ===== COMMENTS =====
        if quote.comment:
            elements.append(Paragraph("COMMENTAIRE", styles['SectionHeader']))
            elements.append(Paragraph(quote.comment, styles['NormalText']))
            elements.append(Spacer(1, 4*mm))

        if quote.observations:
            elements.append(Paragraph("OBSERVATIONS", styles['SectionHeader']))
            elements.append(Paragraph(quote.observations, styles['SmallText']))
            elements.append(Spacer(1, 4*mm))

        # ===== FOOTER =====
        elements.append(Spacer(1, 10*mm))
        salesperson = quote.owner.full_name if quote.owner else ""
        footer_text = f"""
        <i>Devis généré le {self._format_date(datetime.now().date())} par {settings.APP_NAME}
        {('- Commercial: ' + salesperson) if salesperson else ''}</i>
        """
        elements.append(Paragraph(footer_text, styles['SmallText']))

        doc.build(elements)

        return str(filepath)
