# core/job_formatter.py

def format_job_summary(summary: dict, start_time, end_time, duration, title="Billing Run"):
    """Format the scheduled billing job results for email/webhook output."""
    expiry = summary.get("lease_expiry", {})
    invoicing = summary.get("lease_invoicing", {})
    late_fees = summary.get("late_fees", {})

    lines = [
        f"📋 **BMS {title} Report**",
        "",
        "🕒 **Summary**",
        f"• Start: {start_time}",
        f"• End: {end_time}",
        f"• Duration: {duration:.2f} seconds",
        "",
        "📄 **Lease Expiry**",
        f"• Leases expired: {expiry.get('expired', 'N/A')}",
        f"• Subscriptions expired: {expiry.get('subscriptions_expired', 'N/A')}",
        "",
        "🧾 **Lease Invoicing**",
        f"• Processed: {invoicing.get('processed', 'N/A')}",
        f"• Created: {invoicing.get('created', 'N/A')}",
        f"• Skipped: {invoicing.get('skipped', 'N/A')}",
        f"• Errors: {len(invoicing.get('errors', []))}",
        "",
        "⏰ **Late Fees**",
        f"• Invoices checked: {late_fees.get('checked', 'N/A')}",
        f"• Penalties applied: {late_fees.get('applied', 'N/A')}",
        f"• Marked overdue: {late_fees.get('marked_overdue', 'N/A')}",
    ]

    errors = invoicing.get("errors", []) + late_fees.get("errors", [])
    if errors:
        lines.append("")
        lines.append("⚠️ **Errors**")
        for err in errors[:20]:
            lines.append(f"• {err}")

    return "\n".join(lines)
