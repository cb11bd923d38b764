"""HR payroll core package.

Feature modules (attendance, payroll, payslip) each keep a model, a repository
protocol with its MySQL implementation, a service and a thin Flask controller.
The staff directory is consumed read-only.
"""
