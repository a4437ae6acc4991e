"""Calculator modules for the billing engine.

- time_utils: time rounding and duration conversion
- task_calculator: billable entries, task period and task summary
- invoice_calculator: invoice lines, totals, VAT breakdown and period
- invoice_status: paid / past due / way past due predicates

Submodules are imported directly (``from stoptime.calculators.time_utils
import round_time``) because the domain models depend on time_utils.
"""
