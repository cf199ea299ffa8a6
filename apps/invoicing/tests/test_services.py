"""
Tests for buyer and supplier invoicing.

Test coverage:
- Buyer invoice totals, numbering, counter payments and item links
- Balance conservation across create, update and delete
- Legacy invoices written before the discount moved into nett
- Supplier settlement rounding, commission and entry exclusivity
- Fuzzy and explicit item linking
- Statistics and analytics
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase, override_settings
from django.conf import settings
from django.utils import timezone

from apps.cashflow.models import CashFlowTransaction
from apps.cashflow.services import CashFlowService
from apps.entries.models import Entry, EntryItem
from apps.entries.services import EntryService
from apps.entries.status import AUCTIONED, DRAFT, INVOICED
from apps.invoicing.exceptions import DuplicateInvoicingError
from apps.invoicing.models import Invoice, SupplierInvoice
from apps.invoicing.services import BuyerInvoiceService, SupplierInvoiceService
from apps.parties.models import Buyer, Product, Supplier
from shared.exceptions import ConflictError, ServiceValidationError

DAY = date(2026, 10, 19)


class InvoicingTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.supplier = Supplier.objects.create(supplier_name='Green Valley Farms')
        cls.other_supplier = Supplier.objects.create(supplier_name='Hill Top Growers')
        cls.product = Product.objects.create(product_name='Tomato')
        cls.onion = Product.objects.create(product_name='Onion')
        cls.buyer = Buyer.objects.create(buyer_name='Ravi Traders')
        cls.other_buyer = Buyer.objects.create(buyer_name='Lakshmi Stores')

    def sold_entry(self, lots, supplier=None, day=DAY):
        """
        Entry whose items are already sold. ``lots`` is a list of
        (product, quantity, buyer, rate) tuples.
        """
        entries = EntryService()
        entry = entries.create_entry(
            (supplier or self.supplier).id,
            [{'product_id': product.id, 'quantity': quantity} for product, quantity, _, _ in lots],
            entry_date=day,
        )
        for item, (_, quantity, buyer, rate) in zip(entry.items.all(), lots):
            EntryItem.objects.filter(pk=item.pk).update(
                buyer=buyer, rate_per_quantity=Decimal(rate), sub_total=Decimal(quantity) * Decimal(rate),
            )
        return entries.refresh_status(entry)

    def reload(self, obj):
        obj.refresh_from_db()
        return obj

    def item_ids(self, entry):
        return list(entry.items.values_list('pk', flat=True))


class BuyerInvoiceCreateTest(InvoicingTestCase):

    def setUp(self):
        self.service = BuyerInvoiceService()
        self.entry = self.sold_entry([
            (self.product, 10, self.buyer, '50'),
            (self.onion, 4, self.buyer, '25'),
        ])

    def test_create_charges_buyer_and_links_items(self):
        invoice = self.service.create_invoice(
            self.buyer.id, self.item_ids(self.entry), wages='20', adjustments='-5', discount='15',
        )

        self.assertEqual(invoice.total_amount, Decimal('600.00'))
        self.assertEqual(invoice.nett_amount, Decimal('600.00'))
        self.assertEqual(invoice.formula_version, Invoice.FORMULA_CURRENT)
        self.assertEqual(invoice.lines.count(), 2)
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('600.00'))
        self.assertEqual(set(self.entry.items.values_list('invoice_id', flat=True)), {invoice.id})
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, AUCTIONED)

    def test_invoice_numbers_follow_today(self):
        today = timezone.localdate()
        first = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[:1])
        second = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[1:])

        stem = f"BI-{today.year}{today.month:02d}{today.day:03d}-"
        self.assertEqual(first.invoice_number, f"{stem}001")
        self.assertEqual(second.invoice_number, f"{stem}002")

    def test_invoice_counter_continues_past_999(self):
        today = timezone.localdate()
        stem = f"BI-{today.year}{today.month:02d}{today.day:03d}-"
        for number in ('999', '1000'):
            Invoice.objects.create(invoice_number=f"{stem}{number}", buyer=self.other_buyer)

        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))

        self.assertEqual(invoice.invoice_number, f"{stem}1001")

    def test_partly_billed_entry_stays_draft(self):
        self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[:1])
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, DRAFT)

    def test_counter_payment_recorded_as_income(self):
        invoice = self.service.create_invoice(
            self.buyer.id, self.item_ids(self.entry),
            payments=[{'amount': '200', 'discount': '10', 'method': 'Bank', 'reference': 'UTR-1'}],
        )

        self.assertEqual(invoice.paid_amount, Decimal('210.00'))
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('390.00'))
        txn = CashFlowTransaction.objects.get()
        self.assertEqual(txn.category, CashFlowTransaction.CATEGORY_SALES)
        self.assertEqual(txn.related_invoice_ids, [invoice.id])
        self.assertEqual(txn.entity_id, str(self.buyer.id))

    def test_uninvoiced_items(self):
        invoiced = self.item_ids(self.entry)[:1]
        self.service.create_invoice(self.buyer.id, invoiced)
        remaining = list(self.service.get_uninvoiced_items_for_buyer(self.buyer.id))
        self.assertEqual([item.pk for item in remaining], self.item_ids(self.entry)[1:])

    def test_item_of_another_buyer_rejected(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(self.other_buyer.id, self.item_ids(self.entry))
        self.assertEqual(self.reload(self.other_buyer).outstanding, Decimal('0.00'))

    def test_item_billed_twice_rejected(self):
        self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        with self.assertRaises(ConflictError):
            self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[:1])
        self.assertEqual(Invoice.objects.count(), 1)

    def test_items_required(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(self.buyer.id, [])

    def test_buyer_stats(self):
        self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[:1], wages='20', discount='10')
        self.service.create_invoice(self.buyer.id, self.item_ids(self.entry)[1:], adjustments='-5')

        stats = self.service.get_buyer_stats(self.buyer.id)

        self.assertEqual(stats['total_item_value'], Decimal('600.00'))
        self.assertEqual(stats['total_buys'], Decimal('605.00'))
        self.assertEqual(stats['total_wages'], Decimal('20.00'))
        self.assertEqual(stats['total_discounts'], Decimal('10.00'))
        self.assertEqual(stats['positive_adjustments'], Decimal('0.00'))
        self.assertEqual(stats['negative_adjustments'], Decimal('-5.00'))


class BuyerInvoiceLifecycleTest(InvoicingTestCase):

    def setUp(self):
        self.service = BuyerInvoiceService()
        self.entry = self.sold_entry([(self.product, 20, self.buyer, '50')])
        Buyer.objects.filter(pk=self.buyer.pk).update(outstanding=Decimal('125.00'))

    def test_create_then_delete_conserves_balance(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry), wages='30', discount='12')
        self.service.delete_invoice(invoice.id)

        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))
        self.assertFalse(self.entry.items.filter(invoice__isnull=False).exists())
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, DRAFT)

    def test_payment_then_delete_nets_to_zero(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        self.assertEqual(invoice.nett_amount, Decimal('1000.00'))

        CashFlowService().create_transaction(
            type='Income', category='Sales', entity_id=self.buyer.id, amount='1000', method='Cash',
            related_invoice_ids=[invoice.id],
        )
        self.assertEqual(self.reload(invoice).paid_amount, Decimal('1000.00'))
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))

        self.service.delete_invoice(invoice.id)

        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))
        self.assertFalse(CashFlowTransaction.objects.exists())

    def test_delete_keeps_advance_as_credit(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        advance = CashFlowService().create_transaction(
            type='Income', category='Advance Payment', entity_id=self.buyer.id, amount='300', method='Cash',
            related_invoice_ids=[invoice.id],
        )

        self.service.delete_invoice(invoice.id)

        advance.refresh_from_db()
        self.assertEqual(advance.related_invoice_ids, [])
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('-175.00'))

    def test_delete_with_payment_not_charged_to_anyone(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        CashFlowService().create_transaction(
            type='Income', category='Sales', amount='1000', method='Cash', related_invoice_ids=[invoice.id],
        )
        self.assertEqual(self.reload(invoice).paid_amount, Decimal('1000.00'))
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('1125.00'))

        self.service.delete_invoice(invoice.id)

        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))
        self.assertFalse(CashFlowTransaction.objects.exists())

    def test_delete_reverses_payment_on_the_buyer_it_credited(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        CashFlowService().create_transaction(
            type='Income', category='Sales', entity_id=self.other_buyer.id, amount='400', method='Cash',
            related_invoice_ids=[invoice.id],
        )
        self.assertEqual(self.reload(self.other_buyer).outstanding, Decimal('-400.00'))

        self.service.delete_invoice(invoice.id)

        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))
        self.assertEqual(self.reload(self.other_buyer).outstanding, Decimal('0.00'))

    def test_update_recharges_new_totals(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        invoice = self.service.update_invoice(invoice.id, self.buyer.id, self.item_ids(self.entry), discount='40')

        self.assertEqual(invoice.nett_amount, Decimal('960.00'))
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('1085.00'))
        self.assertEqual(set(self.entry.items.values_list('invoice_id', flat=True)), {invoice.id})

    def test_update_moves_invoice_to_new_buyer(self):
        invoice = self.service.create_invoice(self.buyer.id, self.item_ids(self.entry))
        self.entry.items.update(buyer=self.other_buyer)

        self.service.update_invoice(invoice.id, self.other_buyer.id, self.item_ids(self.entry))

        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('125.00'))
        self.assertEqual(self.reload(self.other_buyer).outstanding, Decimal('1000.00'))

    def test_update_dropping_item_unlinks_it(self):
        entry = self.sold_entry(
            [(self.product, 1, self.buyer, '10'), (self.onion, 1, self.buyer, '20')],
            supplier=self.other_supplier,
        )
        keep, drop = self.item_ids(entry)
        invoice = self.service.create_invoice(self.buyer.id, [keep, drop])

        invoice = self.service.update_invoice(invoice.id, self.buyer.id, [keep])

        self.assertIsNone(EntryItem.objects.get(pk=drop).invoice_id)
        self.assertEqual(invoice.total_amount, Decimal('10.00'))
        self.assertEqual(Entry.objects.get(pk=entry.pk).status, DRAFT)


class LegacyInvoiceTest(InvoicingTestCase):
    """Invoices whose stored nett excludes the discount."""

    def setUp(self):
        self.service = BuyerInvoiceService()
        self.entry = self.sold_entry([(self.product, 20, self.buyer, '50')])
        self.invoice = Invoice.objects.create(
            invoice_number='BI-LEGACY-001', buyer=self.buyer, total_amount=Decimal('1000'),
            discount=Decimal('50'), nett_amount=Decimal('1000'), formula_version=Invoice.FORMULA_LEGACY,
        )
        self.entry.items.update(invoice=self.invoice)
        Buyer.objects.filter(pk=self.buyer.pk).update(outstanding=Decimal('950.00'))

    def test_receivable_subtracts_discount(self):
        self.assertTrue(self.invoice.is_legacy_format)
        self.assertEqual(self.invoice.receivable_amount, Decimal('950.00'))
        self.assertEqual(self.invoice.balance_due, Decimal('950.00'))

    def test_legacy_tag_alone_is_not_enough(self):
        self.invoice.nett_amount = Decimal('950')
        self.assertFalse(self.invoice.is_legacy_format)
        self.assertEqual(self.invoice.receivable_amount, Decimal('950'))

    def test_update_reverts_what_was_charged(self):
        invoice = self.service.update_invoice(self.invoice.id, self.buyer.id, self.item_ids(self.entry), discount='50')

        self.assertEqual(invoice.formula_version, Invoice.FORMULA_CURRENT)
        self.assertEqual(invoice.nett_amount, Decimal('950.00'))
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('950.00'))

    def test_delete_reverts_what_was_charged(self):
        self.service.delete_invoice(self.invoice.id)
        self.assertEqual(self.reload(self.buyer).outstanding, Decimal('0.00'))


class SupplierInvoiceTest(InvoicingTestCase):

    def setUp(self):
        self.service = SupplierInvoiceService()
        self.entry = self.sold_entry([(self.product, 10, self.buyer, '50')])

    def lines(self, sub_total='500', rate='50', product=None, **extra):
        line = {
            'product_id': (product or self.product).id,
            'quantity': 10,
            'rate_per_quantity': rate,
            'sub_total': sub_total,
        }
        line.update(extra)
        return [line]

    def test_create_settles_entry(self):
        invoice = self.service.create_invoice(self.supplier.id, [self.entry.id], self.lines(), commission_rate=5)

        self.assertEqual(invoice.gross_total, Decimal('500.00'))
        self.assertEqual(invoice.commission_amount, Decimal('25.00'))
        self.assertEqual(invoice.nett_amount, Decimal('475.00'))
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_UNPAID)
        self.assertEqual(invoice.entry_ids, [self.entry.id])
        self.assertTrue(invoice.invoice_number.startswith('SI-'))
        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('-475.00'))
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, INVOICED)
        self.assertEqual(set(self.entry.items.values_list('supplier_invoice_id', flat=True)), {invoice.id})

    def test_commission_always_rounds_up(self):
        invoice = self.service.create_invoice(
            self.supplier.id, [self.entry.id], self.lines(sub_total='999'), commission_rate=10,
        )
        self.assertEqual(invoice.commission_amount, Decimal('100.00'))
        self.assertEqual(invoice.nett_amount, Decimal('899.00'))

    def test_gross_rounds_halves_up(self):
        invoice = self.service.create_invoice(
            self.supplier.id, [self.entry.id], self.lines(sub_total='500.50'), commission_rate=0,
        )
        self.assertEqual(invoice.gross_total, Decimal('501.00'))

    def test_wages_adjustments_and_advance(self):
        invoice = self.service.create_invoice(
            self.supplier.id, [self.entry.id], self.lines(), commission_rate=5,
            wages='30', adjustments='10', advance_paid='100',
        )
        self.assertEqual(invoice.nett_amount, Decimal('455.00'))
        self.assertEqual(invoice.final_payable, Decimal('355.00'))
        self.assertEqual(invoice.paid_amount, Decimal('100.00'))

    @override_settings(AUCTION_SETTINGS=dict(settings.AUCTION_SETTINGS, DEFAULT_COMMISSION_RATE=Decimal('8')))
    def test_default_commission_rate(self):
        invoice = self.service.create_invoice(self.supplier.id, [self.entry.id], self.lines())
        self.assertEqual(invoice.commission_rate, Decimal('8'))
        self.assertEqual(invoice.commission_amount, Decimal('40.00'))

    def test_entry_cannot_be_settled_twice(self):
        first = self.service.create_invoice(self.supplier.id, [self.entry.id], self.lines())
        other = self.sold_entry([(self.product, 1, self.buyer, '5')], day=DAY + timedelta(days=1))

        with self.assertRaises(DuplicateInvoicingError) as ctx:
            self.service.create_invoice(self.supplier.id, [other.id, self.entry.id], self.lines())

        self.assertEqual(ctx.exception.extra['conflicting_entry_ids'], [self.entry.id])
        self.assertEqual(ctx.exception.extra['invoice_number'], first.invoice_number)
        self.assertEqual(SupplierInvoice.objects.count(), 1)
        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('-500.00'))

    def test_entry_of_another_supplier_rejected(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(self.other_supplier.id, [self.entry.id], self.lines())

    def test_entry_ids_required(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(self.supplier.id, [], self.lines())

    def test_lines_required(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(self.supplier.id, [self.entry.id], [])

    def test_fuzzy_match_links_items_with_close_rate(self):
        entry = self.sold_entry(
            [(self.product, 1, self.buyer, '50'), (self.onion, 1, self.buyer, '50')],
            supplier=self.other_supplier,
        )
        tomato, onion = self.item_ids(entry)

        self.service.create_invoice(self.other_supplier.id, [entry.id], self.lines(rate='50.0005'))

        self.assertIsNotNone(EntryItem.objects.get(pk=tomato).supplier_invoice_id)
        self.assertIsNone(EntryItem.objects.get(pk=onion).supplier_invoice_id)
        self.assertEqual(Entry.objects.get(pk=entry.pk).status, INVOICED)

    def test_named_item_linked_exactly(self):
        entry = self.sold_entry(
            [(self.product, 1, self.buyer, '50'), (self.product, 1, self.buyer, '50')],
            supplier=self.other_supplier,
        )
        first, second = self.item_ids(entry)

        self.service.create_invoice(self.other_supplier.id, [entry.id], self.lines(entry_item_id=first))

        self.assertIsNotNone(EntryItem.objects.get(pk=first).supplier_invoice_id)
        self.assertIsNone(EntryItem.objects.get(pk=second).supplier_invoice_id)

    def test_named_item_must_be_on_selected_entries(self):
        other = self.sold_entry([(self.product, 1, self.buyer, '5')], supplier=self.other_supplier)
        with self.assertRaises(ServiceValidationError):
            self.service.create_invoice(
                self.supplier.id, [self.entry.id], self.lines(entry_item_id=self.item_ids(other)[0]),
            )


class SupplierInvoiceLifecycleTest(InvoicingTestCase):

    def setUp(self):
        self.service = SupplierInvoiceService()
        self.entry = self.sold_entry([(self.product, 10, self.buyer, '50')])
        self.later = self.sold_entry([(self.onion, 2, self.buyer, '25')], day=DAY + timedelta(days=1))
        self.invoice = self.service.create_invoice(
            self.supplier.id, [self.entry.id, self.later.id],
            [
                {'product_id': self.product.id, 'quantity': 10, 'rate_per_quantity': 50, 'sub_total': 500},
                {'product_id': self.onion.id, 'quantity': 2, 'rate_per_quantity': 25, 'sub_total': 50},
            ],
            commission_rate=0,
        )

    def test_update_recomputes_and_releases_dropped_entry(self):
        invoice = self.service.update_invoice(
            self.invoice.id, self.supplier.id, [self.entry.id],
            [{'product_id': self.product.id, 'quantity': 10, 'rate_per_quantity': 50, 'sub_total': 500}],
            commission_rate=10, status='Partially Paid',
        )

        self.assertEqual(invoice.nett_amount, Decimal('450.00'))
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_PARTIAL)
        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('-450.00'))
        self.assertEqual(Entry.objects.get(pk=self.later.pk).status, DRAFT)
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, INVOICED)

    def test_update_keeps_rate_when_not_given(self):
        invoice = self.service.update_invoice(
            self.invoice.id, self.supplier.id, [self.entry.id, self.later.id],
            [{'product_id': self.product.id, 'quantity': 10, 'rate_per_quantity': 50, 'sub_total': 550}],
            wages='50',
        )
        self.assertEqual(invoice.commission_rate, Decimal('0.00'))
        self.assertEqual(invoice.nett_amount, Decimal('500.00'))

    def test_update_rejects_unknown_status(self):
        with self.assertRaises(ServiceValidationError):
            self.service.update_invoice(
                self.invoice.id, self.supplier.id, [self.entry.id], [{'product_id': self.product.id}],
                status='Settled',
            )

    def test_delete_restores_balance_and_entries(self):
        self.service.delete_invoice(self.invoice.id)

        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('0.00'))
        self.assertEqual(Entry.objects.get(pk=self.entry.pk).status, DRAFT)
        self.assertFalse(EntryItem.objects.filter(supplier_invoice__isnull=False).exists())

    def test_delete_removes_payments_and_keeps_advances(self):
        cash = CashFlowService()
        cash.create_transaction(
            type='Expense', category='Supplier Payment', entity_id=self.supplier.id, amount='200',
            method='Bank', related_invoice_ids=[self.invoice.id],
        )
        advance = cash.create_transaction(
            type='Expense', category='Advance Payment', entity_id=self.supplier.id, amount='100',
            method='Cash', related_invoice_ids=[self.invoice.id],
        )
        self.assertEqual(self.reload(self.invoice).status, SupplierInvoice.STATUS_PARTIAL)

        self.service.delete_invoice(self.invoice.id)

        self.assertEqual(list(CashFlowTransaction.objects.all()), [advance])
        self.assertEqual(self.reload(advance).related_invoice_ids, [])
        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('100.00'))

    def test_delete_with_payment_not_charged_to_anyone(self):
        CashFlowService().create_transaction(
            type='Expense', category='Supplier Payment', amount='200', method='Bank',
            related_invoice_ids=[self.invoice.id],
        )
        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('-550.00'))

        self.service.delete_invoice(self.invoice.id)

        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('0.00'))
        self.assertFalse(CashFlowTransaction.objects.exists())

    def test_delete_reverses_payment_on_the_supplier_it_paid(self):
        CashFlowService().create_transaction(
            type='Expense', category='Supplier Payment', entity_id=self.other_supplier.id, amount='200',
            method='Bank', related_invoice_ids=[self.invoice.id],
        )
        self.assertEqual(self.reload(self.other_supplier).outstanding, Decimal('200.00'))

        self.service.delete_invoice(self.invoice.id)

        self.assertEqual(self.reload(self.supplier).outstanding, Decimal('0.00'))
        self.assertEqual(self.reload(self.other_supplier).outstanding, Decimal('0.00'))

    def test_analytics(self):
        SupplierInvoice.objects.filter(pk=self.invoice.pk).update(paid_amount=Decimal('150'))

        analytics = self.service.get_analytics()

        self.assertEqual(analytics['stats']['invoice_count'], 1)
        self.assertEqual(analytics['stats']['total_purchase_value'], Decimal('550.00'))
        self.assertEqual(analytics['stats']['total_amount_paid'], Decimal('150.00'))
        self.assertEqual(analytics['stats']['total_payables'], Decimal('400.00'))
        self.assertEqual(
            analytics['top_suppliers_by_payable'],
            [{'name': 'Green Valley Farms', 'value': Decimal('400.00')}],
        )
