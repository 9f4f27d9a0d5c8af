# tariff_rules package
