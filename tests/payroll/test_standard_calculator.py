from src.backoffice.backoffice.payroll.calculator.standard_calculator import StandardPayrollCalculator


def test_standard_calculator_net():
    calc = StandardPayrollCalculator()
    assert calc.total_earning(basic_salary=3000, allowance=200, overtime=10) == 3210
    assert calc.net(basic_salary=3000, allowance=200, overtime=10, deduction=50, mess=100, advance=0) == 3060


def test_net_is_not_clamped():
    calc = StandardPayrollCalculator()
    assert calc.net(basic_salary=0, allowance=0, overtime=0, deduction=100, mess=50, advance=25) == -175
