# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db pdv.db
  python app.py produto add --nome "Placa de gesso" --preco 29,90 --estoque 150 --categoria Placas
  python app.py venda nova --item 1:5 --pagamento pix
  python app.py orcamento novo --item 1:10 --cliente-nome "Ana" --documento 123.456.789-00
  python app.py rel resumo --de 2025-01-01 --ate 2025-01-31
"""

from pdv.adapters.cli import main

if __name__ == "__main__":
    main()
