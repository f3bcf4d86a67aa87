STATUS_COLORS = {
    'success': '#27ae60',
    'warning': '#f39c12',
    'error': '#e74c3c',
    'info': '#2563eb',
}


def get_clearance_update_email_template(full_name: str, title: str, description: str,
                                        status: str = "info") -> str:
    """
    Creates the HTML email sent when something changes on a student's clearance case.
    Table-based layout so Gmail, Outlook and Yahoo render it the same way.
    """
    accent = STATUS_COLORS.get(status, STATUS_COLORS['info'])
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, Helvetica, sans-serif; background-color: #f4f6fa;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: #f4f6fa;">
        <tr>
            <td align="center" style="padding: 20px 0;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; width: 100%; background-color: #ffffff; border-radius: 12px; overflow: hidden;">
                    <tr>
                        <td style="padding: 24px 40px; background-color: {accent};">
                            <h1 style="margin: 0; font-size: 22px; color: #ffffff;">{title}</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 30px 40px;">
                            <p style="margin: 0 0 16px 0; font-size: 16px; color: #2c3e50;">Hello, {full_name}!</p>
                            <p style="margin: 0 0 24px 0; font-size: 15px; color: #555555; line-height: 1.5;">{description}</p>
                            <p style="margin: 0; font-size: 14px; color: #555555;">
                                Log in to the clearance portal to see the full status of your case.
                            </p>
                        </td>
                    </tr>
                    <tr>
                        <td align="center" style="padding: 20px 40px 30px 40px; background-color: #f8f9fa; border-top: 1px solid #e9ecef;">
                            <p style="margin: 0; font-size: 12px; color: #6c757d;">
                                iClear Student Clearance<br>
                                This is an automated message, please do not reply.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""
