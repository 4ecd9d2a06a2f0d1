# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py precificar itens.xlsx --params params.json
  python app.py precificar itens.csv --regime simples
  python app.py comparar itens.xlsx --params params.json
  python app.py comparar itens.xlsx --venda-minima
  python app.py resumo itens.xlsx --params params.json
  python app.py params show --params params.json
"""

from precificacao.adapters.cli import main

if __name__ == "__main__":
    main()
