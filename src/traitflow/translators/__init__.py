"""
Tradutores de domínio usados por traits específicos.

Funções puras, sem dependência do Engine:
    - uri         → parsing de URIs de endpoints
    - schedule    → consenso de schedule cron entre endpoints periódicos
    - autoscaling → mapeamento de endpoints para triggers de scaler
"""
