"""
Email Templates

HTML templates for the customer document delivery email and the admin payment
notification. All interpolated values are HTML-escaped.
"""

from html import escape
from typing import Any, Dict

from app.models.notifications import AdminEmailData, CustomerEmailData

FIRM_NAME = "AKA Law"
FIRM_FULL_NAME = "Anchané Kriek Attorneys"
FIRM_EMAIL = "info@akalaw.co.za"
FIRM_PHONE = "+27 82 562 3826"
FIRM_WEBSITE = "www.akalaw.co.za"
FIRM_ADDRESS = "2 Lenchen Park, Lenchen Avenue South, Centurion, 0046, South Africa"


def format_rand(amount: float) -> str:
    """Format an amount in Rand, e.g. 1550 -> 'R1,550'."""
    if float(amount).is_integer():
        return f"R{int(amount):,}"
    return f"R{amount:,.2f}"


def _escaped(data: Dict[str, Any]) -> Dict[str, str]:
    return {key: escape(str(value)) for key, value in data.items() if value is not None}


def get_customer_email_template(data: CustomerEmailData) -> str:
    """Customer email template: document delivery with a download link."""
    values = _escaped(data.model_dump())
    amount = format_rand(data.amount)

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="utf-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>Your Legal Document Purchase</title>
      <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; background-color: #f8f9fa; }}
        .container {{ max-width: 600px; margin: 0 auto; background: white; }}
        .header {{ background: #1e40af; color: white; padding: 30px; text-align: center; }}
        .logo {{ font-size: 24px; font-weight: bold; }}
        .content {{ padding: 40px 30px; }}
        .document-info {{ background: #f1f5f9; border-left: 4px solid #1e40af; padding: 20px; margin: 20px 0; }}
        .download-button {{ display: inline-block; background: #1e40af; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: bold; margin: 20px 0; }}
        .consultation-info {{ background: #dcfce7; border-left: 4px solid #16a34a; padding: 20px; margin: 20px 0; }}
        .footer {{ background: #f8f9fa; padding: 30px; text-align: center; font-size: 14px; color: #6b7280; }}
        .reference {{ font-family: monospace; background: #f3f4f6; padding: 5px 10px; border-radius: 3px; }}
      </style>
    </head>
    <body>
      <div class="container">
        <div class="header">
          <div class="logo">AKA LAW</div>
          <p>{FIRM_FULL_NAME}</p>
        </div>

        <div class="content">
          <h2>Thank you for your purchase, {values["customer_name"]}!</h2>

          <p>Your legal document purchase has been successfully processed. You can download your document using the link below.</p>

          <div class="document-info">
            <h3>Document Details</h3>
            <p><strong>Document:</strong> {values["document_title"]}</p>
            <p><strong>Amount Paid:</strong> {amount}</p>
            <p><strong>Reference:</strong> <span class="reference">{values["reference"]}</span></p>
            <p><strong>Format:</strong> PDF &amp; Word Document</p>
          </div>

          <div style="text-align: center; margin: 30px 0;">
            <a href="{values["download_url"]}" class="download-button">Download Your Document</a>
          </div>

          <div class="consultation-info">
            <h3>FREE Consultation Included!</h3>
            <p><strong>Your purchase includes a complimentary 20-minute consultation</strong> with one of our qualified attorneys to discuss the document and answer any questions about its use.</p>
            <p>To schedule your consultation, simply reply to this email or call us at <strong>{FIRM_PHONE}</strong>.</p>
          </div>

          <h3>Important Notes:</h3>
          <ul>
            <li>This document is for informational purposes and does not constitute legal advice</li>
            <li>We recommend reviewing the document with a qualified attorney before use</li>
            <li>Your 20-minute consultation can help ensure proper usage</li>
            <li>Keep this email and your reference number for your records</li>
          </ul>

          <p>If you have any questions or need assistance, please don't hesitate to contact us:</p>
          <ul>
            <li><strong>Email:</strong> {FIRM_EMAIL}</li>
            <li><strong>Phone:</strong> {FIRM_PHONE}</li>
            <li><strong>Website:</strong> {FIRM_WEBSITE}</li>
          </ul>
        </div>

        <div class="footer">
          <p><strong>{FIRM_NAME} - {FIRM_FULL_NAME}</strong></p>
          <p>{FIRM_ADDRESS}</p>
          <p>This email was sent because you purchased a legal document from our website.</p>
        </div>
      </div>
    </body>
    </html>
    """


def get_admin_email_template(data: AdminEmailData) -> str:
    """Admin email template: payment notification."""
    values = _escaped(data.model_dump())
    amount = format_rand(data.amount)
    phone_row = (
        f'<p><strong>Phone:</strong> {values["customer_phone"]}</p>'
        if data.customer_phone
        else ""
    )

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="utf-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>New Document Purchase - {values["reference"]}</title>
      <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; background-color: #f8f9fa; }}
        .container {{ max-width: 600px; margin: 0 auto; background: white; }}
        .header {{ background: #16a34a; color: white; padding: 30px; text-align: center; }}
        .content {{ padding: 30px; }}
        .success-badge {{ background: #dcfce7; color: #166534; padding: 10px 20px; border-radius: 20px; display: inline-block; font-weight: bold; }}
        .info-grid {{ display: grid; grid-template-columns: 1fr 1fr; gap: 20px; margin: 20px 0; }}
        .info-card {{ background: #f8f9fa; padding: 20px; border-radius: 8px; }}
        .amount {{ font-size: 32px; font-weight: bold; color: #16a34a; }}
        .reference {{ font-family: monospace; background: #f3f4f6; padding: 5px 10px; border-radius: 3px; }}
        .footer {{ background: #f8f9fa; padding: 20px; text-align: center; font-size: 14px; color: #6b7280; }}
        @media (max-width: 600px) {{ .info-grid {{ grid-template-columns: 1fr; }} }}
      </style>
    </head>
    <body>
      <div class="container">
        <div class="header">
          <h1>New Document Purchase</h1>
          <p>Payment Successfully Processed</p>
        </div>

        <div class="content">
          <div class="success-badge">PAYMENT SUCCESSFUL</div>

          <h2>Purchase Details</h2>

          <div class="info-grid">
            <div class="info-card">
              <h4>Customer Information</h4>
              <p><strong>Name:</strong> {values["customer_name"]}</p>
              <p><strong>Email:</strong> {values["customer_email"]}</p>
              {phone_row}
            </div>

            <div class="info-card">
              <h4>Document Information</h4>
              <p><strong>Title:</strong> {values["document_title"]}</p>
              <p><strong>Category:</strong> {values["document_category"]}</p>
              <p><strong>Format:</strong> PDF &amp; Word</p>
            </div>
          </div>

          <div style="text-align: center; margin: 30px 0; padding: 20px; background: #f0fdf4; border-radius: 8px;">
            <div class="amount">{amount}</div>
            <p><strong>Payment Date:</strong> {values["payment_date"]}</p>
            <p><strong>Reference:</strong> <span class="reference">{values["reference"]}</span></p>
          </div>

          <h3>Action Items:</h3>
          <ul>
            <li>Customer has been automatically sent the document via email</li>
            <li>Customer has access to 20-minute free consultation</li>
            <li>Payment has been recorded in the system</li>
            <li>Customer data has been saved for future reference</li>
          </ul>

          <div style="background: #fef3c7; border-left: 4px solid #f59e0b; padding: 15px; margin: 20px 0;">
            <p><strong>Reminder:</strong> Each document purchase includes a complimentary 20-minute consultation.</p>
          </div>
        </div>

        <div class="footer">
          <p>This notification was automatically generated by the {FIRM_NAME} website payment system.</p>
          <p>Payment processed via Paystack</p>
        </div>
      </div>
    </body>
    </html>
    """
