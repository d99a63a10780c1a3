"""
Tests for Payroll Module

Tests for statutory contributions, Alphalist generation and the Alphalist
Excel export.
"""

import pytest
from decimal import Decimal

from openpyxl import load_workbook

from payroll.contributions import (
    ContributionCalculator,
    StatutoryContribution,
    calculate_pagibig_contribution,
    calculate_philhealth_contribution,
    calculate_sss_contribution,
)
from payroll.alphalist import (
    AlphalistEntry,
    Employee,
    generate_alphalist,
)
from payroll.excel_generator import AlphalistExcelGenerator
from tax.money import InvalidAmount


class TestSSSContribution:
    """Tests for SSS bracket contributions."""

    @pytest.mark.parametrize("salary,employee,employer,total", [
        (3000, "60.75", "74.25", "135.00"),
        (9000, "182.25", "222.75", "405.00"),
        (25000, "405.00", "495.00", "900.00"),
        (100000, "405.00", "495.00", "900.00"),
    ])
    def test_bracket_values(self, salary, employee, employer, total):
        result = calculate_sss_contribution(salary)

        assert isinstance(result, StatutoryContribution)
        assert result.employee == Decimal(employee)
        assert result.employer == Decimal(employer)
        assert result.total == Decimal(total)

    def test_bracket_upper_bound_is_exclusive(self):
        """Test a salary equal to a bracket ceiling falls in the next bracket."""
        assert calculate_sss_contribution(3249.99).total == Decimal("135.00")
        assert calculate_sss_contribution(3250).total == Decimal("157.50")

    def test_shares_sum_to_total(self):
        """Test rounding of the employee share never breaks the split."""
        for salary in range(1000, 21000, 250):
            result = calculate_sss_contribution(salary)
            assert result.employee + result.employer == result.total
            assert result.employer >= result.employee

    def test_negative_salary(self):
        with pytest.raises(InvalidAmount):
            calculate_sss_contribution(-1)


class TestPhilHealthContribution:
    """Tests for PhilHealth premiums."""

    def test_premium_split_evenly(self):
        result = calculate_philhealth_contribution(10000)

        assert result.total == Decimal("500.00")
        assert result.employee == Decimal("250.00")
        assert result.employer == Decimal("250.00")

    def test_premium_cap(self):
        result = calculate_philhealth_contribution(150000)

        assert result.total == Decimal("5000.00")
        assert result.employee == Decimal("2500.00")

    @pytest.mark.parametrize("salary,share,total", [
        ("100.10", "2.50", "5.00"),
        ("10000.10", "250.00", "500.00"),
        ("10000.30", "250.01", "500.02"),
    ])
    def test_odd_centavo_shares_stay_equal(self, salary, share, total):
        """Test each half is rounded separately and the total is their sum."""
        result = calculate_philhealth_contribution(salary)

        assert result.employee == result.employer == Decimal(share)
        assert result.total == Decimal(total)

    def test_non_numeric_salary(self):
        with pytest.raises(InvalidAmount):
            calculate_philhealth_contribution("abc")


class TestPagibigContribution:
    """Tests for Pag-IBIG contributions."""

    def test_two_percent_each(self):
        result = calculate_pagibig_contribution(5000)

        assert result.employee == Decimal("100.00")
        assert result.employer == Decimal("100.00")
        assert result.total == Decimal("200.00")

    @pytest.mark.parametrize("salary", [10000, 250001, 1000000])
    def test_cap(self, salary):
        result = calculate_pagibig_contribution(salary)

        assert result.employee == Decimal("200.00")
        assert result.employer == Decimal("200.00")
        assert result.total == Decimal("400.00")

    def test_to_dict(self):
        assert calculate_pagibig_contribution(5000).to_dict() == {
            "employee": 100.0,
            "employer": 100.0,
            "total": 200.0,
        }


class TestContributionCalculator:
    """Tests for table loading and combined deductions."""

    def test_calculate_all(self):
        deductions = ContributionCalculator().calculate_all(25000)

        assert deductions.employee_total == Decimal("1230.00")
        assert deductions.employer_total == Decimal("1320.00")
        assert deductions.to_dict()["sss"]["total"] == 900.0

    def test_tables_override(self, tmp_path):
        """Test a YAML section replaces the default table."""
        (tmp_path / "contribution_tables.yaml").write_text(
            "pagibig:\n"
            "  employee_rate: 0.03\n"
            "  employer_rate: 0.02\n"
            "  max_each: 100\n"
        )
        calculator = ContributionCalculator(config_dir=tmp_path)

        result = calculator.calculate_pagibig(3000)
        assert result.employee == Decimal("90.00")
        assert result.employer == Decimal("60.00")
        assert calculator.calculate_pagibig(10000).employee == Decimal("100.00")
        assert calculator.calculate_sss(3000).total == Decimal("135.00")

    def test_missing_tables_use_defaults(self, tmp_path):
        calculator = ContributionCalculator(config_dir=tmp_path)
        assert calculator.calculate_sss(25000).total == Decimal("900.00")


class TestAlphalist:
    """Tests for Alphalist generation."""

    def test_entry_from_hr_record(self, sample_employee):
        entries = generate_alphalist([sample_employee], 2024)

        assert len(entries) == 1
        entry = entries[0]
        assert isinstance(entry, AlphalistEntry)
        assert entry.tin == "123-456-789-001"
        assert entry.last_name == "Dela Cruz"
        assert entry.first_name == "Juan"
        assert entry.middle_name == "Santos"
        assert entry.gross_compensation == Decimal("300000.00")
        assert entry.year == 2024

    def test_non_taxable_and_tax(self, sample_employee):
        """Test twelve months of employee contributions are non-taxable."""
        entry = generate_alphalist([sample_employee], 2024)[0]

        # (405 SSS + 625 PhilHealth + 200 Pag-IBIG) * 12
        assert entry.non_taxable_compensation == Decimal("14760.00")
        assert entry.taxable_compensation == Decimal("285240.00")
        # 35,240 over 250,000 at 15%
        assert entry.withholding_tax == Decimal("5286.00")

    def test_low_salary_has_no_tax(self):
        employee = Employee(first_name="Ana", last_name="Reyes", basic_salary=Decimal("15000"))
        entry = generate_alphalist([employee], 2024)[0]

        assert entry.tin == ""
        assert entry.middle_name == ""
        assert entry.withholding_tax == Decimal("0.00")

    def test_employee_full_name(self, sample_employee):
        assert Employee.from_dict(sample_employee).full_name == "Dela Cruz, Juan Santos"

    def test_invalid_salary(self):
        with pytest.raises(InvalidAmount):
            generate_alphalist([{"firstName": "A", "lastName": "B", "basicSalary": -1}], 2024)

    def test_to_dict(self, sample_employee):
        data = generate_alphalist([sample_employee], 2024)[0].to_dict()

        assert data["gross_compensation"] == 300000.0
        assert data["withholding_tax"] == 5286.0


class TestAlphalistExcelGenerator:
    """Tests for Alphalist Excel export."""

    def test_generate_workbook(self, sample_employee, tmp_path):
        entries = generate_alphalist(
            [sample_employee, {"firstName": "Ana", "lastName": "Reyes", "basicSalary": 15000}],
            2024,
        )
        output = AlphalistExcelGenerator().generate(
            entries, 2024, tmp_path / "out" / "alphalist.xlsx", employer_name="Test Business Inc."
        )

        assert output.exists()
        ws = load_workbook(output).active

        assert ws.title == "Alphalist"
        assert ws["A1"].value == "Alphalist of Employees - 2024"
        assert ws["A2"].value == "Test Business Inc."
        assert ws["B4"].value == "TIN"
        assert ws["B5"].value == "123-456-789-001"
        assert ws["C5"].value == "Dela Cruz"
        assert ws["F5"].value == 300000
        assert ws["C6"].value == "Reyes"
        assert ws["A7"].value == "TOTAL"
        assert ws["F7"].value == 480000
        assert ws["I7"].value == 5286

    def test_generate_default_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        output = AlphalistExcelGenerator(config_dir=tmp_path).generate([], 2024)

        assert output.name.startswith("Alphalist_2024_")
        assert (tmp_path / output).exists()
