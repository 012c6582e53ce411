"""Monthly recap of recorded transactions."""
from collections import Counter, defaultdict
from datetime import date
from typing import List, Optional, Union

from .models import Transaction, MonthlyRecap
from catatuang.utils import get_logger

logger = get_logger()


class Aggregator:
    """Aggregates transactions by category for one month."""
    
    def aggregate(
        self,
        transactions: List[Transaction],
        chat_id: Optional[Union[int, str]] = None,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> MonthlyRecap:
        """
        Aggregate transactions by category.
        
        Args:
            transactions: Transactions of any month
            chat_id: Chat identifier
            month: Month to recap; inferred from the transactions if omitted
            year: Year to recap; inferred from the transactions if omitted
            
        Returns:
            MonthlyRecap holding only the transactions of that month
        """
        if month is None or year is None:
            inferred_year, inferred_month = self._infer_period(transactions)
            month = month or inferred_month
            year = year or inferred_year
        
        selected = [
            txn for txn in transactions
            if txn.date.month == month and txn.date.year == year
        ]
        
        totals = defaultdict(int)
        for txn in selected:
            totals[txn.category] += txn.amount
        
        recap = MonthlyRecap(
            chat_id=str(chat_id) if chat_id is not None else None,
            year=year,
            month=month,
            totals=dict(totals),
            transactions=selected
        )
        
        logger.info(
            f"Aggregated {len(selected)} transactions into {len(totals)} categories "
            f"for {month:02d}/{year}"
        )
        return recap
    
    def _infer_period(self, transactions: List[Transaction]) -> tuple:
        """Most common (year, month) among the transactions, current month if none."""
        if not transactions:
            today = date.today()
            return today.year, today.month
        
        period_counts = Counter((txn.date.year, txn.date.month) for txn in transactions)
        return period_counts.most_common(1)[0][0]
