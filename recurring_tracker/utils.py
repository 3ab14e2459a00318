# recurring_tracker/utils.py

def filter_transactions_by_month(transactions, month_str):
    """
    Return only those transactions whose date falls in the given YYYY-MM.
    """
    year, month = map(int, month_str.split('-'))
    return [tx for tx in transactions if tx.date.year == year and tx.date.month == month]

def dedupe_transactions(transactions):
    """
    Remove transactions whose id was already seen, keeping the first.
    """
    seen = set()
    unique = []
    for tx in transactions:
        if tx.id not in seen:
            seen.add(tx.id)
            unique.append(tx)
    return unique
