"""
Dataset registry: which report feeds which slot kind.

Each dataset names
  - kind:         slot kind used in Top_{i}_{kind}_Name
  - report_path:  host report endpoint, {account_id} is substituted per call
  - log_tag:      prefix used in every log line about this dataset

To add a dataset, append a DatasetSpec to DEFAULT_DATASETS. The pipelines
for different datasets never share slots.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DatasetSpec:
    key: str
    kind: str
    report_path: str
    log_tag: str

    def path_for(self, account_id: str) -> str:
        return self.report_path.format(account_id=account_id)


MATERIALS = DatasetSpec(
    key="materials",
    kind="Material",
    report_path=(
        "/analytics/2/{account_id}/ds_Top_Material_Child_Table_Popula_A00"
        "/report/Child_table_top_material_Admin_A00"
    ),
    log_tag="[Top Materials]",
)

CUSTOMERS = DatasetSpec(
    key="customers",
    kind="Customer",
    report_path="/process-report/2/{account_id}/Sales_Return_Process_A00/CUSTOMER_TOP_PIVOT_A00",
    log_tag="[Top Customers]",
)

DEFAULT_DATASETS: tuple[DatasetSpec, ...] = (MATERIALS, CUSTOMERS)

DATASETS_BY_KEY: dict[str, DatasetSpec] = {d.key: d for d in DEFAULT_DATASETS}
