"""Response validation, per-method validators, run reports and the check runner."""